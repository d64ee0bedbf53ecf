"""
SheetBlog Processing Module
===========================

Pipeline orchestration, subscriber notification and post list views.
"""

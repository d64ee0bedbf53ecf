"""
Built-in sample posts served when no source can be reached.
"""

from typing import List

from .models import Post

SAMPLE_POSTS: List[Post] = [
    Post(
        load=True,
        id="1",
        title="Getting Started with React Hooks",
        slug="getting-started-with-react-hooks",
        excerpt="Learn how to use React Hooks to simplify your functional components.",
        content=(
            "# Getting Started with React Hooks\n\n"
            "React Hooks let you use state and other React features without writing a class component.\n\n"
            "## useState Hook\n\n"
            "The `useState` hook lets you add state to functional components.\n\n"
            "## useEffect Hook\n\n"
            "The `useEffect` hook lets you perform side effects in function components."
        ),
        author="Jane Developer",
        date="2023-03-15",
        read_time="8 min read",
        categories=["React", "JavaScript", "Frontend"],
        featured_image="/images/react-hooks.jpg",
        featured=True,
    ),
    Post(
        load=True,
        id="2",
        title="Building a Blog with Next.js",
        slug="building-a-blog-with-nextjs",
        excerpt="A comprehensive guide to creating a high-performance blog using Next.js.",
        content=(
            "# Building a Blog with Next.js\n\n"
            "Next.js is a React framework that makes building websites easier.\n\n"
            "## Setting Up Your Project\n\n"
            "```bash\nnpx create-next-app my-blog\ncd my-blog\nnpm run dev\n```\n\n"
            "## Creating Blog Posts\n\n"
            "We'll use Markdown for our blog posts, which allows for rich content formatting."
        ),
        author="Sam Tech",
        date="2023-04-21",
        read_time="12 min read",
        categories=["Next.js", "React", "Web Development"],
        featured_image="/images/nextjs-blog.jpg",
        featured=True,
    ),
    Post(
        load=True,
        id="3",
        title="CSS Grid Layout: A Complete Guide",
        slug="css-grid-layout-complete-guide",
        excerpt="Master CSS Grid Layout with this comprehensive guide for web developers.",
        content=(
            "# CSS Grid Layout: A Complete Guide\n\n"
            "CSS Grid Layout is a two-dimensional grid system for web layouts.\n\n"
            "## Basic Grid Container\n\n"
            "```css\n.grid-container {\n  display: grid;\n  grid-template-columns: repeat(3, 1fr);\n  grid-gap: 20px;\n}\n```"
        ),
        author="Alex Designer",
        date="2023-05-10",
        read_time="10 min read",
        categories=["CSS", "Web Design", "Frontend"],
        featured_image="/images/css-grid.jpg",
        featured=False,
    ),
    Post(
        load=True,
        id="4",
        title="TypeScript for JavaScript Developers",
        slug="typescript-for-javascript-developers",
        excerpt="Learn how TypeScript can improve your JavaScript development workflow.",
        content=(
            "# TypeScript for JavaScript Developers\n\n"
            "TypeScript adds static typing to JavaScript, providing better tooling and error-catching.\n\n"
            "## Interfaces\n\n"
            "```typescript\ninterface User {\n  name: string;\n  id: number;\n  email?: string;\n}\n```"
        ),
        author="Taylor Programmer",
        date="2023-06-02",
        read_time="15 min read",
        categories=["TypeScript", "JavaScript", "Programming"],
        featured_image="/images/typescript.jpg",
        featured=False,
    ),
    Post(
        load=True,
        id="5",
        title="Responsive Design Best Practices",
        slug="responsive-design-best-practices",
        excerpt="Essential techniques for creating websites that work well on all devices.",
        content=(
            "# Responsive Design Best Practices\n\n"
            "Responsive web design ensures your website works on any device size.\n\n"
            "## Flexible Images\n\n"
            "```css\nimg {\n  max-width: 100%;\n  height: auto;\n}\n```\n\n"
            "## Mobile-First Approach\n\n"
            "Design for mobile first, then enhance for larger screens."
        ),
        author="Morgan UX",
        date="2023-06-15",
        read_time="9 min read",
        categories=["CSS", "Responsive Design", "Web Development"],
        featured_image="/images/responsive-design.jpg",
        featured=False,
    ),
]


def loadable_sample_posts() -> List[Post]:
    """Sample posts that are switched on for publishing."""
    return [post for post in SAMPLE_POSTS if post.load]

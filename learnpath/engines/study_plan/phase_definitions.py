"""
Static phase-definition table for the web development study plan.

Phase order here IS the curriculum order; it never depends on content.
"""

from typing import Tuple

from learnpath.engines.study_plan.types import PhaseSpec

WEB_DEVELOPMENT_PHASES: Tuple[PhaseSpec, ...] = (
    PhaseSpec(
        id="html-foundations",
        title="HTML Foundations",
        description="Learn the building blocks of web development with HTML",
        color_token="from-orange-400 to-red-500",
        icon_token="Globe",
        estimated_weeks=2,
        category_slug="html",
    ),
    PhaseSpec(
        id="css-foundations",
        title="CSS Foundations",
        description="Style and layout your web pages with CSS",
        color_token="from-blue-400 to-purple-500",
        icon_token="Palette",
        estimated_weeks=3,
        category_slug="css",
    ),
    PhaseSpec(
        id="javascript-fundamentals",
        title="JavaScript Fundamentals",
        description="Master the core concepts and syntax of JavaScript",
        color_token="from-green-400 to-blue-500",
        icon_token="Sprout",
        estimated_weeks=4,
        category_slug="javascript",
        keywords=("variables", "functions", "arrays", "loops"),
    ),
    PhaseSpec(
        id="dom-interactivity",
        title="DOM Manipulation & Interactivity",
        description="Learn to make web pages interactive and dynamic",
        color_token="from-purple-400 to-pink-500",
        icon_token="MousePointer",
        estimated_weeks=3,
        category_slug="dom",
        keywords=("dom", "event listener", "query selector"),
    ),
    PhaseSpec(
        id="oop-concepts",
        title="Object-Oriented Programming",
        description="Master classes, inheritance, and OOP principles",
        color_token="from-orange-400 to-red-500",
        icon_token="Building",
        estimated_weeks=3,
        category_slug="javascript-oop",
        keywords=(
            "object-oriented",
            "class constructor",
            "inheritance extends",
            "polymorphism override",
            "encapsulation private",
            "abstraction interface",
        ),
    ),
    PhaseSpec(
        id="async-programming",
        title="Asynchronous JavaScript",
        description="Master promises, async/await, and API integration",
        color_token="from-yellow-400 to-orange-500",
        icon_token="Zap",
        estimated_weeks=4,
        category_slug="javascript-async",
        keywords=(
            "asynchronous javascript",
            "async await",
            "promise then",
            "fetch api",
            "callback function",
        ),
    ),
    PhaseSpec(
        id="advanced-concepts",
        title="Advanced JavaScript",
        description="Deep dive into advanced concepts and patterns",
        color_token="from-red-400 to-purple-600",
        icon_token="Flame",
        estimated_weeks=5,
        category_slug="javascript-advanced",
        keywords=(
            "advanced javascript",
            "closure scope",
            "prototype chain",
            "design pattern",
        ),
    ),
    PhaseSpec(
        id="data-structures",
        title="Data Structures & Algorithms",
        description="Master computer science fundamentals",
        color_token="from-blue-400 to-indigo-600",
        icon_token="Database",
        estimated_weeks=4,
        category_slug="data-structures",
        keywords=(
            "data structure",
            "algorithm",
            "linked list",
            "binary tree",
            "graph traversal",
            "hash table",
            "sorting",
        ),
    ),
)

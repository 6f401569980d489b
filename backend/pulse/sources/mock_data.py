"""
Built-in demo corpus of short posts.
"""
from __future__ import annotations

from typing import Any, Dict, List

MOCK_POSTS: List[Dict[str, Any]] = [
    {
        "id": "1",
        "author": "Jane Cooper",
        "handle": "janecooper",
        "avatar": "https://i.pravatar.cc/150?u=janecooper",
        "text": "Just shipped our new landing page with Next.js and it is blazing fast. Loving the developer experience!",
        "timestamp": "2024-05-20T10:30:00Z",
    },
    {
        "id": "2",
        "author": "Wade Warren",
        "handle": "wadewarren",
        "avatar": "https://i.pravatar.cc/150?u=wadewarren",
        "text": "Next.js build times on our monorepo are getting painfully slow. Anyone else seeing this?",
        "timestamp": "2024-05-20T11:05:00Z",
    },
    {
        "id": "3",
        "author": "Esther Howard",
        "handle": "estherhoward",
        "avatar": "https://i.pravatar.cc/150?u=estherhoward",
        "text": "The new AI coding assistants are incredible. Saved me hours of boilerplate today.",
        "timestamp": "2024-05-20T12:15:00Z",
    },
    {
        "id": "4",
        "author": "Cameron Williamson",
        "handle": "cameronw",
        "avatar": "https://i.pravatar.cc/150?u=cameronw",
        "text": "Honestly worried about how much AI-generated content is flooding my feed. Quality is dropping.",
        "timestamp": "2024-05-20T13:40:00Z",
    },
    {
        "id": "5",
        "author": "Brooklyn Simmons",
        "handle": "brooklyns",
        "avatar": "https://i.pravatar.cc/150?u=brooklyns",
        "text": "Attending a React conference next week. Will post notes on the server components talks.",
        "timestamp": "2024-05-21T08:00:00Z",
    },
    {
        "id": "6",
        "author": "Leslie Alexander",
        "handle": "lesliealex",
        "avatar": "https://i.pravatar.cc/150?u=lesliealex",
        "text": "React hooks still confuse half my team. The mental model just does not click for everyone.",
        "timestamp": "2024-05-21T09:20:00Z",
    },
    {
        "id": "7",
        "author": "Jenny Wilson",
        "handle": "jennyw",
        "avatar": "https://i.pravatar.cc/150?u=jennyw",
        "text": "Tailwind CSS made our design system so much easier to maintain. Great tool.",
        "timestamp": "2024-05-21T10:45:00Z",
    },
    {
        "id": "8",
        "author": "Guy Hawkins",
        "handle": "guyhawkins",
        "avatar": "https://i.pravatar.cc/150?u=guyhawkins",
        "text": "Our cloud bill tripled this month after the AI feature launch. Not great.",
        "timestamp": "2024-05-21T14:10:00Z",
    },
    {
        "id": "9",
        "author": "Robert Fox",
        "handle": "robertfox",
        "avatar": "https://i.pravatar.cc/150?u=robertfox",
        "text": "TypeScript 5 is out. Reading through the release notes now.",
        "timestamp": "2024-05-22T07:55:00Z",
    },
    {
        "id": "10",
        "author": "Kristin Watson",
        "handle": "kristinw",
        "avatar": "https://i.pravatar.cc/150?u=kristinw",
        "text": "Migrated our dashboard to Next.js app router. Some rough edges, but overall a solid upgrade.",
        "timestamp": "2024-05-22T09:30:00Z",
    },
    {
        "id": "11",
        "author": "Darlene Robertson",
        "handle": "darlener",
        "avatar": "https://i.pravatar.cc/150?u=darlener",
        "text": "Firebase outage took our whole app down for an hour. Terrible timing before a demo.",
        "timestamp": "2024-05-22T15:25:00Z",
    },
    {
        "id": "12",
        "author": "Jacob Jones",
        "handle": "jacobjones",
        "avatar": "https://i.pravatar.cc/150?u=jacobjones",
        "text": "Firebase auth plus Firestore got our prototype running in an afternoon. Impressed.",
        "timestamp": "2024-05-22T18:00:00Z",
    },
]

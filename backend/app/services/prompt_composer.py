"""Builds the daily task-generation prompt from journal history and goals."""
from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Sequence

TASK_CATEGORIES = (
    "learning",
    "health",
    "productivity",
    "wellness",
    "creativity",
    "social",
    "financial",
    "personal",
)
TASK_PRIORITIES = ("high", "medium", "low")

MIN_TASKS = 5
MAX_TASKS = 7
MIN_TASK_MINUTES = 10
MAX_TASK_MINUTES = 45

RECENT_WEIGHT = 40
GOAL_WEIGHT = 40
MEDIUM_WEIGHT = 15
OLD_WEIGHT = 5

MEDIUM_CHAR_BUDGET = 100
OLD_CHAR_BUDGET = 50
MEDIUM_PROMPT_LIMIT = 3
OLD_PROMPT_LIMIT = 2


@dataclass(frozen=True)
class JournalSnippet:
    date: date
    content: str


@dataclass(frozen=True)
class GoalSnippet:
    id: str
    title: str
    duration: str
    progress: int = 0
    description: Optional[str] = None


@dataclass(frozen=True)
class PromptInputs:
    recent: Sequence[JournalSnippet]
    medium: Sequence[JournalSnippet]
    old: Sequence[JournalSnippet]
    goals: Sequence[GoalSnippet]

    @property
    def is_empty(self) -> bool:
        """True when there is nothing worth generating from."""
        return not self.recent and not self.goals


OUTPUT_SCHEMA_EXAMPLE = {
    "tasks": [
        {
            "title": "Specific task title",
            "description": "Clear description of what to do and why",
            "category": "|".join(TASK_CATEGORIES),
            "timeEstimate": "X minutes",
            "priority": "|".join(TASK_PRIORITIES),
            "relatedGoalId": "optional id of the goal this task supports",
        }
    ],
    "dailyQuote": "Inspiring quote relevant to the user's current situation",
    "focusArea": "Main area of focus for the day (2-4 words)",
}


def truncate(text: str, budget: int) -> str:
    """Cut ``text`` to at most ``budget`` characters, ending the cut with an ellipsis."""
    cleaned = text.strip()
    if len(cleaned) <= budget:
        return cleaned
    return cleaned[: budget - 3].rstrip() + "..."


def compose_task_prompt(inputs: PromptInputs) -> str:
    """Return the full prompt text for one user's daily task generation."""
    sections = [
        "You are a life coach AI. Create "
        f"{MIN_TASKS}-{MAX_TASKS} specific, actionable tasks for the target day based on this user's information.",
        "",
        f"RECENT JOURNALS (Most Important - last 7 days, {RECENT_WEIGHT}% weight):",
        _render_recent(inputs.recent),
        "",
        f"USER GOALS ({GOAL_WEIGHT}% weight):",
        _render_goals(inputs.goals),
        "",
        f"MEDIUM TERM JOURNALS (8-30 days ago, {MEDIUM_WEIGHT}% weight):",
        _render_truncated(inputs.medium[:MEDIUM_PROMPT_LIMIT], MEDIUM_CHAR_BUDGET),
        "",
        f"OLD JOURNALS (30+ days ago, {OLD_WEIGHT}% weight):",
        _render_truncated(inputs.old[:OLD_PROMPT_LIMIT], OLD_CHAR_BUDGET),
        "",
        "INSTRUCTIONS:",
        f"1. Create {MIN_TASKS}-{MAX_TASKS} specific tasks for the target day.",
        f"2. Focus mostly on recent journals ({RECENT_WEIGHT}% weight) and user goals ({GOAL_WEIGHT}% weight).",
        f"3. Medium journals get {MEDIUM_WEIGHT}% weight, old journals get {OLD_WEIGHT}% weight.",
        f"4. Each task should take {MIN_TASK_MINUTES}-{MAX_TASK_MINUTES} minutes.",
        "5. Make tasks actionable and specific.",
        "6. Include tasks that help achieve the user's goals; set relatedGoalId to the goal's ID when a task supports one.",
        "7. Consider the user's mood, challenges, and interests from their journals.",
        f"8. Use only these categories: {', '.join(TASK_CATEGORIES)}.",
        "9. Provide exactly one daily quote and one focus area of 2-4 words.",
        "",
        "RESPONSE FORMAT (must be a single valid JSON object, no commentary):",
        json.dumps(OUTPUT_SCHEMA_EXAMPLE, indent=2),
    ]
    return "\n".join(sections)


def _render_recent(journals: Sequence[JournalSnippet]) -> str:
    if not journals:
        return "None"
    return "\n\n".join(
        f"Date: {journal.date.isoformat()}\nContent: {journal.content}" for journal in journals
    )


def _render_goals(goals: Sequence[GoalSnippet]) -> str:
    if not goals:
        return "None"
    blocks: List[str] = []
    for goal in goals:
        blocks.append(
            f"Goal ID: {goal.id}\n"
            f"Goal: {goal.title}\n"
            f"Duration: {goal.duration}\n"
            f"Progress: {goal.progress}%\n"
            f"Description: {goal.description or 'No description'}"
        )
    return "\n\n".join(blocks)


def _render_truncated(journals: Sequence[JournalSnippet], budget: int) -> str:
    if not journals:
        return "None"
    return "\n".join(f"{journal.date.isoformat()}: {truncate(journal.content, budget)}" for journal in journals)

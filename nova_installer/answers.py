"""Questions the installer may need answered, and how answers are decided.

A decision is a pure function of explicit answers (config file or CLI
flags), an optional interactive front end, and a per-question default used
for unattended runs. Steps never prompt; they read the decisions made here.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Protocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Question:
    key: str
    text: str
    # Used when no answer was supplied and nobody can be asked.
    default: bool


INSTALL_DEVELOPER_TOOLS = Question(
    key="install_developer_tools",
    text=(
        "Would you like to install developer tools?\n\n"
        "This includes build tools, programming languages and container tools."
    ),
    default=False,
)

UPGRADE_TO_TESTING = Question(
    key="upgrade_to_testing",
    text=(
        "This system is not running Debian Testing.\n\n"
        "Would you like to upgrade to Debian Testing?\n\n"
        "WARNING: This will upgrade your entire system!"
    ),
    default=False,
)

QUESTIONS = {q.key: q for q in (INSTALL_DEVELOPER_TOOLS, UPGRADE_TO_TESTING)}


class Asker(Protocol):
    interactive: bool

    def ask(self, question: Question) -> bool:
        ...


def parse_answer(value: Any) -> Optional[bool]:
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    s = str(value).strip().lower()
    if s in {"y", "yes", "true", "1", "on"}:
        return True
    if s in {"n", "no", "false", "0", "off"}:
        return False
    raise ValueError(f"Cannot interpret answer {value!r} as yes/no")


def decide(question: Question, answers: Mapping[str, Any], asker: Optional[Asker] = None) -> bool:
    explicit = parse_answer(answers.get(question.key))
    if explicit is not None:
        logger.info("Answer %s=%s (explicit)", question.key, explicit)
        return explicit

    if asker is not None and asker.interactive:
        answer = bool(asker.ask(question))
        logger.info("Answer %s=%s (asked)", question.key, answer)
        return answer

    logger.info("Answer %s=%s (unattended default)", question.key, question.default)
    return question.default


@dataclass(frozen=True)
class Decisions:
    install_developer_tools: bool = False

"""Communist Test question bank and answer checking."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

from communistopoly.shared.enums import TestDifficulty

if TYPE_CHECKING:
    from communistopoly.shared.rng import DeterministicRandomService


class TestQuestion(BaseModel):
    """A single trivia question with its accepted answers."""

    __test__ = False

    model_config = ConfigDict(frozen=True)

    id: str
    difficulty: TestDifficulty
    question: str
    answer: str
    acceptable_answers: tuple[str, ...] = Field(default_factory=tuple)
    reward: int = Field(default=0, ge=0)
    penalty: int = Field(default=0, ge=0)
    grants_rank_up: bool = False


def _q(  # noqa: PLR0913
    question_id: str,
    difficulty: TestDifficulty,
    question: str,
    answer: str,
    acceptable: tuple[str, ...],
    reward: int,
    penalty: int,
) -> TestQuestion:
    return TestQuestion(
        id=question_id,
        difficulty=difficulty,
        question=question,
        answer=answer,
        acceptable_answers=acceptable,
        reward=reward,
        penalty=penalty,
        grants_rank_up=difficulty is TestDifficulty.HARD,
    )


_EASY = TestDifficulty.EASY
_MEDIUM = TestDifficulty.MEDIUM
_HARD = TestDifficulty.HARD
_TRICK = TestDifficulty.TRICK

QUESTION_BANK: tuple[TestQuestion, ...] = (
    _q(
        "easy-1",
        _EASY,
        "What does USSR stand for?",
        "Union of Soviet Socialist Republics",
        ("union of soviet socialist republics", "ussr", "soviet union"),
        100,
        0,
    ),
    _q(
        "easy-2",
        _EASY,
        "Who wrote The Communist Manifesto?",
        "Karl Marx and Friedrich Engels",
        ("karl marx and friedrich engels", "marx and engels", "karl marx", "marx"),
        100,
        0,
    ),
    _q(
        "easy-3",
        _EASY,
        "What year did the Russian Revolution occur?",
        "1917",
        ("1917",),
        100,
        0,
    ),
    _q(
        "medium-1",
        _MEDIUM,
        "In what year did Stalin come to power?",
        "1924",
        ("1924",),
        200,
        100,
    ),
    _q(
        "medium-2",
        _MEDIUM,
        "What was the name of Stalin's policy of rapid industrialization?",
        "Five-Year Plans",
        ("five-year plans", "five year plans", "five year plan", "5 year plans"),
        200,
        100,
    ),
    _q(
        "medium-3",
        _MEDIUM,
        "Who did Stalin have assassinated in Mexico in 1940?",
        "Leon Trotsky",
        ("leon trotsky", "trotsky"),
        200,
        100,
    ),
    _q(
        "hard-1",
        _HARD,
        "What was Stalin's birth name?",
        "Ioseb Jughashvili",
        ("ioseb jughashvili", "jughashvili", "iosif dzhugashvili"),
        400,
        200,
    ),
    _q(
        "hard-2",
        _HARD,
        "Name the Soviet general who led the defence of Stalingrad.",
        "Vasily Chuikov or Georgy Zhukov",
        ("vasily chuikov", "chuikov", "georgy zhukov", "zhukov"),
        400,
        200,
    ),
    _q(
        "hard-3",
        _HARD,
        "What was the name of the 1956 speech in which Khrushchev denounced Stalin?",
        "The Secret Speech",
        ("secret speech", "the secret speech", "on the cult of personality"),
        400,
        200,
    ),
    _q(
        "trick-1",
        _TRICK,
        "Do you have any complaints about the State?",
        "No",
        ("no", "no comrade", "never", "none", "no complaints"),
        0,
        0,
    ),
    _q(
        "trick-2",
        _TRICK,
        "Are you happy?",
        "Yes",
        ("yes", "yes comrade", "always", "very happy", "of course"),
        0,
        0,
    ),
    _q(
        "trick-3",
        _TRICK,
        "Would you die for the Motherland?",
        "Without hesitation, Comrade.",
        ("yes", "without hesitation", "of course", "gladly", "always"),
        0,
        0,
    ),
)

_DIFFICULTY_WEIGHTS: tuple[tuple[float, TestDifficulty], ...] = (
    (0.40, _EASY),
    (0.75, _MEDIUM),
    (0.95, _HARD),
    (1.00, _TRICK),
)


def questions_by_difficulty(difficulty: TestDifficulty) -> tuple[TestQuestion, ...]:
    return tuple(q for q in QUESTION_BANK if q.difficulty is difficulty)


def get_question(question_id: str) -> TestQuestion | None:
    """Return the question with *question_id*, if present."""
    for question in QUESTION_BANK:
        if question.id == question_id:
            return question
    return None


def is_answer_correct(question: TestQuestion, user_answer: str) -> bool:
    """Case-insensitive substring match against any acceptable answer."""
    normalized = user_answer.strip().lower()
    if not normalized:
        return False
    return any(
        normalized in acceptable or acceptable in normalized
        for acceptable in (option.lower() for option in question.acceptable_answers)
    )


def draw_difficulty(rng: DeterministicRandomService) -> TestDifficulty:
    """Pick a difficulty using the 40/35/20/5 weighting."""
    value = rng.random()
    for threshold, difficulty in _DIFFICULTY_WEIGHTS:
        if value < threshold:
            return difficulty
    return _TRICK


def draw_question(
    rng: DeterministicRandomService,
    difficulty: TestDifficulty | None = None,
) -> TestQuestion:
    """Draw a question, choosing a weighted difficulty when none is given."""
    tier = difficulty or draw_difficulty(rng)
    return rng.choice(questions_by_difficulty(tier))


__all__ = [
    "QUESTION_BANK",
    "TestQuestion",
    "draw_difficulty",
    "draw_question",
    "get_question",
    "is_answer_correct",
    "questions_by_difficulty",
]

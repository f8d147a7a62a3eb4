from __future__ import annotations
import hashlib, json, secrets


class InvalidSolutionData(ValueError):
    """Stored solutions for a challenge could not be read as a list of answers."""


def generate_code(nbytes: int = 16) -> str:
    return secrets.token_hex(nbytes)


def answer_hash(solution: str, code: str) -> str:
    """The hash a user must submit: sha1 hex of the solution followed by their code."""
    return hashlib.sha1(f"{solution}{code}".encode("utf-8")).hexdigest()


def _solution_text(value) -> str:
    # null reads as an empty answer; other non-strings by their JSON spelling, e.g. 42 -> "42"
    if value is None:
        return ""
    return value if isinstance(value, str) else json.dumps(value)


def parse_solutions(solutions_json: str) -> list[str]:
    try:
        solutions = json.loads(solutions_json)
    except (TypeError, json.JSONDecodeError) as e:
        raise InvalidSolutionData(f"solutions are not valid JSON: {e}") from e
    if not isinstance(solutions, list):
        raise InvalidSolutionData(f"solutions must be a JSON list, got {type(solutions).__name__}")
    return [_solution_text(s) for s in solutions]


def check_submission(code: str, solutions_json: str, submitted: str) -> bool:
    return any(answer_hash(s, code) == submitted for s in parse_solutions(solutions_json))

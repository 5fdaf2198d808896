"""
Schema validation for okrlint.

Checks loaded configuration against the JSON Schemas shipped in
okrlint/schemas. All problems are reported at once, ordered by where they
occur in the document.
"""

import json
from functools import lru_cache
from pathlib import Path

import jsonschema

SCHEMAS_DIR = Path(__file__).parent.parent / "schemas"


class ValidationError(Exception):
    """Data does not match a schema.

    problems holds one (path, message) pair per violation, path being a
    dotted location such as "projects.0.title" or "(root)".
    """

    def __init__(self, schema_name: str, problems: list[tuple[str, str]]):
        self.schema_name = schema_name
        self.problems = problems
        details = "; ".join(f"{message} at {path}" for path, message in problems)
        super().__init__(f"[{schema_name}] {details}")


@lru_cache(maxsize=None)
def load_schema(schema_name: str) -> dict:
    schema_path = SCHEMAS_DIR / f"{schema_name}.schema.json"
    if not schema_path.exists():
        raise FileNotFoundError(f"Schema file not found: {schema_path}")
    return json.loads(schema_path.read_text())


def _dotted(path) -> str:
    return ".".join(str(p) for p in path) if path else "(root)"


def validate(data, schema_name: str) -> None:
    """
    Validate data against the named schema.

    Raises:
        ValidationError: listing every violation found
    """
    schema = load_schema(schema_name)
    validator_cls = jsonschema.validators.validator_for(schema)
    validator = validator_cls(schema)

    errors = sorted(validator.iter_errors(data), key=lambda e: list(map(str, e.absolute_path)))
    if errors:
        raise ValidationError(
            schema_name,
            [(_dotted(e.absolute_path), e.message) for e in errors],
        )

from __future__ import annotations

import json
import re

from pydantic import ValidationError

from ..domain.exceptions import ResponseParseError, ResponseValidationError
from ..domain.models import AnalysisPayload


_JSON_FENCE = re.compile(r"```json\s*")
_BARE_FENCE = re.compile(r"```\s*")


class ResponseInterpreter:
    """Domain service turning raw model replies into an ``AnalysisPayload``.

    The model is told to answer with raw JSON but often wraps it in markdown
    fences anyway. Fences are stripped, the text is parsed, and the result is
    validated against the payload schema before anything downstream reads it.
    """

    def strip_fences(self, text: str) -> str:
        """Remove ```json and ``` markers and surrounding whitespace."""
        cleaned = _JSON_FENCE.sub("", text)
        cleaned = _BARE_FENCE.sub("", cleaned)
        return cleaned.strip()

    def interpret(self, text: str) -> AnalysisPayload:
        """Parse and validate a model reply.

        Args:
            text: Assistant message content, possibly fenced

        Returns:
            Validated analysis payload

        Raises:
            ResponseParseError: If the text is not valid JSON
            ResponseValidationError: If the JSON does not match the expected schema
        """
        cleaned = self.strip_fences(text)
        try:
            parsed = json.loads(cleaned)
        except json.JSONDecodeError as e:
            raise ResponseParseError(
                f"AI response is not valid JSON: {e.msg} (line {e.lineno}, column {e.colno})",
                raw_text=cleaned,
            ) from e

        try:
            return AnalysisPayload.model_validate(parsed)
        except ValidationError as e:
            errors = [
                {"loc": ".".join(str(p) for p in err["loc"]), "msg": err["msg"]}
                for err in e.errors()
            ]
            summary = "; ".join(f"{err['loc'] or '<root>'}: {err['msg']}" for err in errors[:5])
            raise ResponseValidationError(
                f"AI response does not match the analysis schema: {summary}",
                errors=errors,
            ) from e

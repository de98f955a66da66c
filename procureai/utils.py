import json
import re

_FENCE = re.compile(r"```(?:json)?", re.IGNORECASE)


def strip_code_fences(text: str) -> str:
    return _FENCE.sub("", text or "").strip()


def load_json_reply(text: str) -> dict:
    """Parse a model reply into a dict, tolerating fences and chatter around the object."""
    content = strip_code_fences(text)
    try:
        data = json.loads(content)
    except json.JSONDecodeError:
        start, end = content.find("{"), content.rfind("}")
        if start == -1 or end <= start:
            raise ValueError("Could not parse JSON from model reply.")
        try:
            data = json.loads(content[start:end + 1])
        except json.JSONDecodeError as exc:
            raise ValueError(f"Could not parse JSON from model reply: {exc.msg}") from exc

    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object, got {type(data).__name__}.")
    return data

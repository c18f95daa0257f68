import re

from markupsafe import Markup, escape


LINK_PATTERN = re.compile(r"\[([^\]]+)\]\((https?://[^\s)]+)\)")


def linkify_text(text):
    """Convert [label](url) in task descriptions into safe links."""
    if not text:
        return ""
    parts = []
    last = 0
    for match in LINK_PATTERN.finditer(text):
        parts.append(escape(text[last:match.start()]))
        label = escape(match.group(1))
        url = match.group(2)
        parts.append(
            Markup(
                f'<a href="{escape(url)}" target="_blank" rel="noopener noreferrer">{label}</a>'
            )
        )
        last = match.end()
    parts.append(escape(text[last:]))
    return Markup("".join(str(part) for part in parts))


def format_time_12h(value):
    """'14:30' or a time object -> '2:30 PM'."""
    if not value:
        return ""
    if hasattr(value, "hour"):
        hour, minute = value.hour, value.minute
    else:
        hour, minute = (int(part) for part in str(value).split(":")[:2])
    display = 12 if hour % 12 == 0 else hour % 12
    return f"{display}:{minute:02d} {'AM' if hour < 12 else 'PM'}"

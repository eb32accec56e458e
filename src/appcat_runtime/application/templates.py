"""``${name}`` placeholder substitution for connection secret templates."""

from __future__ import annotations

import re
from typing import Mapping

_PLACEHOLDER_RE = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")
PASSWORD_VARIABLE = "password"


def render_template(template: str, variables: Mapping[str, str]) -> str:
    """Replace each ``${name}`` in *template* with ``variables[name]``.

    Unknown placeholders are left verbatim. Substituted values are not scanned
    again, so a value containing ``${...}`` is emitted literally.

    Examples
    --------
    >>> render_template("redis://:${password}@${instanceName}:6379", {"password": "p1", "instanceName": "my-redis"})
    'redis://:p1@my-redis:6379'
    >>> render_template("${unknown}-${namespace}", {"namespace": "ns1"})
    '${unknown}-ns1'
    """

    def _replace(match: re.Match[str]) -> str:
        name = match.group(1)
        if name in variables:
            return variables[name]
        return match.group(0)

    return _PLACEHOLDER_RE.sub(_replace, template)


def extract_variable(template: str, rendered: str, name: str, variables: Mapping[str, str]) -> str | None:
    """Recover the value substituted for ``${name}`` when *template* produced *rendered*.

    Literal text and the other known placeholders must match exactly; unknown
    placeholders are expected verbatim, as :func:`render_template` leaves them.
    Returns ``None`` when *template* does not mention ``${name}`` or *rendered*
    does not fit it.

    Examples
    --------
    >>> extract_variable("redis://:${password}@${instanceName}:6379", "redis://:s3cret@my-redis:6379",
    ...                  "password", {"instanceName": "my-redis"})
    's3cret'
    >>> extract_variable("redis://:${password}@${instanceName}:6379", "redis://:s3cret@other:6379",
    ...                  "password", {"instanceName": "my-redis"}) is None
    True
    """

    pattern: list[str] = []
    captured = False
    position = 0
    for match in _PLACEHOLDER_RE.finditer(template):
        pattern.append(re.escape(template[position : match.start()]))
        placeholder = match.group(1)
        if placeholder == name:
            pattern.append("(?P=value)" if captured else "(?P<value>.+?)")
            captured = True
        elif placeholder in variables:
            pattern.append(re.escape(variables[placeholder]))
        else:
            pattern.append(re.escape(match.group(0)))
        position = match.end()
    if not captured:
        return None
    pattern.append(re.escape(template[position:]))
    found = re.fullmatch("".join(pattern), rendered, flags=re.DOTALL)
    return found.group("value") if found else None


def template_variables(instance_name: str, namespace: str, password: str) -> dict[str, str]:
    """Return the variable set available to connection secret templates."""

    return {"instanceName": instance_name, "namespace": namespace, PASSWORD_VARIABLE: password}

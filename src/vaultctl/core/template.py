"""Render templates that reference Vault secrets.

Rendering takes two passes. The first executes the template locally; the
secret functions do not contact Vault but hand out unique placeholders and
record what was asked for. The second reads every referenced path once and
swaps the placeholders for the real values. Secrets referenced inside
conditionals or loops are only known after the template has run, and no
output is produced unless every reference resolves.

Three functions are available to templates:

    {{ secret("secret/db", "password") }}   string value of a key
    {{ nested("secret/app", "config.db.host") }}  walk JSON stored in a key
    {{ decode("secret/tls") }}              whole typed secret via its codec

The bare call style {{ secret "secret/db" "password" }} is accepted as well.
"""

from __future__ import annotations

import json
import logging
import re
import secrets
from pathlib import Path
from typing import Any

import jinja2
from jinja2.sandbox import SandboxedEnvironment

from vaultctl.codec import CODEC_TYPE_KEY, CodecRegistry, default_registry
from vaultctl.core.paths import api_path
from vaultctl.errors import (
    KeyNotFoundError,
    LocalIOError,
    SecretNotFoundError,
    TemplateError,
    VaultError,
)
from vaultctl.vault.base import SecretStore

logger = logging.getLogger(__name__)

ENGINES = ("text", "html")
TEMPLATE_FUNCTIONS = ("secret", "nested", "decode")

_STRING_LITERAL = r'"(?:[^"\\]|\\.)*"'
_BARE_CALL = re.compile(
    r"\{\{(?P<open>-?)\s*(?P<func>" + "|".join(TEMPLATE_FUNCTIONS) + r")"
    r"(?P<args>(?:\s+" + _STRING_LITERAL + r")+)\s*(?P<close>-?)\}\}"
)


def rewrite_bare_calls(source: str) -> str:
    """Turn {{ secret "a" "b" }} into {{ secret("a", "b") }}."""

    def replace(match: re.Match[str]) -> str:
        args = re.findall(_STRING_LITERAL, match.group("args"))
        return "{{%s %s(%s) %s}}" % (
            match.group("open"),
            match.group("func"),
            ", ".join(args),
            match.group("close"),
        )

    return _BARE_CALL.sub(replace, source)


_PLACEHOLDER = re.compile(r"_VAULT_(?:STRING|NESTED|DECODE)_[0-9a-f]{16}_")
# Any remains of a placeholder, in any case; catches filtered or sliced tokens
_PLACEHOLDER_FRAGMENT = re.compile(
    r"_VAULT_|VAULT.(?:STRING|NESTED|DECODE)|(?:STRING|NESTED|DECODE).[0-9a-f]{8}",
    re.IGNORECASE,
)


def placeholder(kind: str) -> str:
    """Return a fresh placeholder token for a kind of lookup."""
    return f"_VAULT_{kind.upper()}_{secrets.token_hex(8)}_"


class LookupTable:
    """Secret references collected during the first pass of one render."""

    def __init__(self) -> None:
        self.strings: dict[str, dict[str, str]] = {}
        self.nested: dict[str, dict[str, str]] = {}
        self.decodes: dict[str, str] = {}

    @staticmethod
    def _check(func: str, *args: Any) -> None:
        for arg in args:
            if not isinstance(arg, str):
                raise TemplateError(f"{func}: expected string arguments, got {arg!r}")

    def secret(self, path: str, key: str) -> str:
        self._check("secret", path, key)
        keys = self.strings.setdefault(api_path(path), {})
        if key not in keys:
            keys[key] = placeholder("string")
        return keys[key]

    def nested_secret(self, path: str, key: str) -> str:
        self._check("nested", path, key)
        keys = self.nested.setdefault(api_path(path), {})
        if key not in keys:
            keys[key] = placeholder("nested")
        return keys[key]

    def decode(self, path: str) -> str:
        self._check("decode", path)
        path = api_path(path)
        if path not in self.decodes:
            self.decodes[path] = placeholder("decode")
        return self.decodes[path]

    def functions(self) -> dict[str, Any]:
        return {"secret": self.secret, "nested": self.nested_secret, "decode": self.decode}

    def tokens(self) -> set[str]:
        """Every placeholder handed out."""
        tokens = set(self.decodes.values())
        for keys in (*self.strings.values(), *self.nested.values()):
            tokens.update(keys.values())
        return tokens

    def paths(self) -> list[str]:
        """Every distinct path referenced, in first-seen order per kind."""
        seen: dict[str, None] = {}
        for path in (*self.decodes, *self.strings, *self.nested):
            seen.setdefault(path, None)
        return list(seen)


class TemplateRenderer:
    """Two-pass renderer for templates with secret references."""

    def __init__(
        self,
        store: SecretStore,
        codecs: CodecRegistry | None = None,
        engine: str = "text",
    ):
        if engine not in ENGINES:
            raise TemplateError(f"unknown template engine {engine!r}")
        self.store = store
        self.codecs = codecs or default_registry()
        self.engine = engine
        self.environment = SandboxedEnvironment(
            autoescape=engine == "html",
            undefined=jinja2.StrictUndefined,
            keep_trailing_newline=True,
        )

    def parse(self, source: str, name: str = "<template>") -> jinja2.Template:
        """Compile template source.

        Raises:
            TemplateError: On a syntax error
        """
        try:
            return self.environment.from_string(rewrite_bare_calls(source))
        except jinja2.TemplateSyntaxError as e:
            raise TemplateError(f"{name}:{e.lineno}: {e.message}") from e

    def render_file(self, path: Path | str) -> str:
        """Render the template stored in a local file."""
        path = Path(path)
        try:
            source = path.read_bytes().decode("utf-8")
        except UnicodeDecodeError as e:
            raise TemplateError(f"{path}: not valid UTF-8") from e
        except OSError as e:
            raise LocalIOError(f"{path}: {e.strerror or e}") from e
        return self.render(source, name=str(path))

    def render(self, source: str, name: str = "<template>") -> str:
        """Render template source, substituting secrets from the store."""
        template = self.parse(source, name)
        lookups = LookupTable()

        try:
            content = template.render(**lookups.functions())
        except VaultError:
            raise
        except Exception as e:
            raise TemplateError(f"{name}: {e}") from e

        logger.debug(
            "template: %d path(s) referenced in %s", len(lookups.paths()), name
        )
        return self.substitute(content, lookups)

    def substitute(self, content: str, lookups: LookupTable) -> str:
        """Fetch every referenced secret once and replace its placeholders."""
        self._check_placeholders(content, lookups)
        payloads = {path: self._fetch(path) for path in lookups.paths()}

        for path, token in lookups.decodes.items():
            content = content.replace(token, self._decode(path, payloads[path]))
        for path, keys in lookups.strings.items():
            for key, token in keys.items():
                content = content.replace(token, self._string(path, payloads[path], key))
        for path, keys in lookups.nested.items():
            for key, token in keys.items():
                content = content.replace(token, self._nested(path, payloads[path], key))

        return content

    @staticmethod
    def _check_placeholders(content: str, lookups: LookupTable) -> None:
        """Fail unless every placeholder in content is one handed out, unchanged."""
        tokens = lookups.tokens()
        rest = _PLACEHOLDER.sub(lambda m: "" if m.group(0) in tokens else m.group(0), content)
        if _PLACEHOLDER_FRAGMENT.search(rest):
            raise TemplateError(
                "secret references cannot be passed through filters or string operations"
            )

    def _fetch(self, path: str) -> dict[str, Any]:
        logger.debug("template: read %r", path)
        payload = self.store.read_secret(path)
        if payload is None:
            raise SecretNotFoundError(f"secret {path}: not found")
        return payload

    def _decode(self, path: str, payload: dict[str, Any]) -> str:
        data = dict(payload)
        kind = data.pop(CODEC_TYPE_KEY, None)
        if not isinstance(kind, str):
            raise KeyNotFoundError(f"decode {path}: key {CODEC_TYPE_KEY} not found")
        raw = self.codecs.codec_for(kind).marshal(path, data)
        return raw.decode("utf-8", errors="surrogateescape")

    @staticmethod
    def _string(path: str, payload: dict[str, Any], key: str) -> str:
        value = payload.get(key)
        if not isinstance(value, str):
            raise KeyNotFoundError(f"secret {path}: key {key!r} not found")
        return value

    @staticmethod
    def _nested(path: str, payload: dict[str, Any], dotted: str) -> str:
        first, *rest = dotted.split(".")
        encoded = payload.get(first)
        if not isinstance(encoded, str):
            raise KeyNotFoundError(f"nested {path}: key {first!r} not found")
        try:
            value: Any = json.loads(encoded)
        except ValueError as e:
            raise TemplateError(f"nested {path}/{first}: failed to parse JSON") from e

        for key in rest:
            if not isinstance(value, dict) or key not in value:
                raise KeyNotFoundError(f"nested {path}: key {key!r} not found")
            value = value[key]

        if not isinstance(value, str):
            raise TemplateError(f"nested {path}: key {dotted!r} is not a string")
        return value

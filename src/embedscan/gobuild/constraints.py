"""Go build constraints: filename suffixes and ``//go:build`` lines."""

import re
from collections.abc import Callable

from embedscan.gobuild.context import BuildContext

KNOWN_OS = frozenset(
    {
        "aix",
        "android",
        "darwin",
        "dragonfly",
        "freebsd",
        "hurd",
        "illumos",
        "ios",
        "js",
        "linux",
        "nacl",
        "netbsd",
        "openbsd",
        "plan9",
        "solaris",
        "wasip1",
        "windows",
        "zos",
    }
)

UNIX_OS = frozenset(
    {
        "aix",
        "android",
        "darwin",
        "dragonfly",
        "freebsd",
        "hurd",
        "illumos",
        "ios",
        "linux",
        "netbsd",
        "openbsd",
        "solaris",
    }
)

KNOWN_ARCH = frozenset(
    {
        "386",
        "amd64",
        "amd64p32",
        "arm",
        "armbe",
        "arm64",
        "arm64be",
        "loong64",
        "mips",
        "mipsle",
        "mips64",
        "mips64le",
        "mips64p32",
        "mips64p32le",
        "ppc",
        "ppc64",
        "ppc64le",
        "riscv",
        "riscv64",
        "s390",
        "s390x",
        "sparc",
        "sparc64",
        "wasm",
    }
)

# newest go1.N release tag considered satisfied
GO_MINOR_RELEASE = 23

_TOKEN_RE = re.compile(r"\s*(\(|\)|!|&&|\|\||[A-Za-z0-9_.]+)")


class ConstraintSyntaxError(ValueError):
    pass


def match_tag(context: BuildContext, tag: str) -> bool:
    if tag in context.build_tags:
        return True
    if tag == context.goos or tag == context.goarch:
        return True
    if tag == "unix":
        return context.goos in UNIX_OS
    if tag == "cgo":
        return context.cgo_enabled
    if tag == "gc":
        return True
    if tag == "linux" and context.goos == "android":
        return True
    if tag == "solaris" and context.goos == "illumos":
        return True
    if tag == "darwin" and context.goos == "ios":
        return True
    if tag.startswith("go1."):
        minor = tag[len("go1.") :]
        return minor.isdigit() and 1 <= int(minor) <= GO_MINOR_RELEASE
    return False


def good_os_arch_file(context: BuildContext, filename: str) -> bool:
    """Apply the ``_GOOS``, ``_GOARCH`` and ``_GOOS_GOARCH`` filename suffixes."""
    name = filename.rsplit(".", 1)[0]
    index = name.find("_")
    if index < 0:
        return True
    parts = name[index:].split("_")
    if parts and parts[-1] == "test":
        parts = parts[:-1]
    n = len(parts)
    if n >= 2 and parts[n - 2] in KNOWN_OS and parts[n - 1] in KNOWN_ARCH:
        return match_tag(context, parts[n - 2]) and match_tag(context, parts[n - 1])
    if n >= 1 and (parts[n - 1] in KNOWN_OS or parts[n - 1] in KNOWN_ARCH):
        return match_tag(context, parts[n - 1])
    return True


def _tokenize(expression: str) -> list[str]:
    tokens: list[str] = []
    position = 0
    stripped = expression.rstrip()
    while position < len(stripped):
        found = _TOKEN_RE.match(stripped, position)
        if found is None:
            raise ConstraintSyntaxError(f"unexpected character in build constraint: {stripped[position:]!r}")
        tokens.append(found.group(1))
        position = found.end()
    return tokens


class _ExprParser:
    def __init__(self, tokens: list[str], matches: Callable[[str], bool]) -> None:
        self._tokens = tokens
        self._pos = 0
        self._matches = matches

    def _peek(self) -> str | None:
        return self._tokens[self._pos] if self._pos < len(self._tokens) else None

    def _next(self) -> str:
        token = self._peek()
        if token is None:
            raise ConstraintSyntaxError("unexpected end of build constraint")
        self._pos += 1
        return token

    def parse(self) -> bool:
        result = self._or()
        if self._peek() is not None:
            raise ConstraintSyntaxError(f"unexpected token {self._peek()!r} in build constraint")
        return result

    def _or(self) -> bool:
        result = self._and()
        while self._peek() == "||":
            self._next()
            right = self._and()
            result = result or right
        return result

    def _and(self) -> bool:
        result = self._not()
        while self._peek() == "&&":
            self._next()
            right = self._not()
            result = result and right
        return result

    def _not(self) -> bool:
        if self._peek() == "!":
            self._next()
            return not self._not()
        return self._atom()

    def _atom(self) -> bool:
        token = self._next()
        if token == "(":
            result = self._or()
            if self._next() != ")":
                raise ConstraintSyntaxError("missing ')' in build constraint")
            return result
        if token in {")", "&&", "||"}:
            raise ConstraintSyntaxError(f"unexpected token {token!r} in build constraint")
        return self._matches(token)


def eval_expression(context: BuildContext, expression: str) -> bool:
    return _ExprParser(_tokenize(expression), lambda tag: match_tag(context, tag)).parse()


def _plus_build_term(context: BuildContext, term: str) -> bool:
    if term.startswith("!!") or term in {"", "!"}:
        return False
    if term.startswith("!"):
        return not match_tag(context, term[1:])
    return match_tag(context, term)


def eval_plus_build_line(context: BuildContext, line: str) -> bool:
    """Evaluate one ``// +build`` line: spaces OR options, commas AND terms."""
    return any(all(_plus_build_term(context, term) for term in option.split(",")) for option in line.split())


def _header_lines(source: str) -> list[str]:
    """Line comments of the file header, with '' marking blank lines.

    The header ends at the first line that is neither blank nor a comment.
    """
    lines: list[str] = []
    in_block = False
    for raw in source.splitlines():
        line = raw.strip()
        if in_block:
            if "*/" in line:
                in_block = False
            continue
        if not line:
            lines.append("")
            continue
        if line.startswith("//"):
            lines.append(line)
            continue
        if line.startswith("/*"):
            in_block = "*/" not in line[2:]
            continue
        break
    return lines


def header_constraint(source: str) -> str | None:
    """Return the ``//go:build`` expression from the file header, if any."""
    for line in _header_lines(source):
        if line.startswith("//go:build") and (len(line) == len("//go:build") or line[10] in " \t"):
            return line[len("//go:build") :].strip()
    return None


def plus_build_lines(source: str) -> list[str]:
    """Return the ``// +build`` lines that apply to the file.

    Only lines in comment blocks followed by a blank line count.
    """
    committed: list[str] = []
    pending: list[str] = []
    for line in _header_lines(source):
        if not line:
            committed.extend(pending)
            pending = []
            continue
        text = line[2:].strip()
        if text.startswith("+build") and (len(text) == len("+build") or text[6] in " \t"):
            pending.append(text[len("+build") :].strip())
    return committed


def should_build(context: BuildContext, source: str) -> bool:
    expression = header_constraint(source)
    if expression is not None:
        return eval_expression(context, expression)
    return all(eval_plus_build_line(context, line) for line in plus_build_lines(source))

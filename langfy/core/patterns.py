"""Extraction rules for translatable strings in PHP and Blade sources.

Three rule categories exist:

* ``function-call``: ``__('Text')``, ``trans("Text", [...])``, ``@lang('Text')``.
  Runs against the raw file content.
* ``annotated-property``: class properties marked with a ``/** @trans */``
  docblock or a ``#[Trans]`` attribute.
* ``annotated-variable``: local assignments marked with ``/** @trans */``.

Annotation rules run against normalized content (line comments removed, line
breaks collapsed) so an annotation on one line still matches the declaration
on the next.
"""

import re
from dataclasses import dataclass
from typing import Iterable, Iterator, Sequence, Set, Tuple

FUNCTION_CALL = 'function-call'
ANNOTATED_PROPERTY = 'annotated-property'
ANNOTATED_VARIABLE = 'annotated-variable'

DEFAULT_FUNCTIONS = ('__', 'trans', '@lang')

MIN_STRING_LENGTH = 2

# Quoted literal bodies; escaped characters are kept verbatim for unescape().
_LITERALS = {
    "'": r"'((?:[^'\\]|\\.)*)'",
    '"': r'"((?:[^"\\]|\\.)*)"',
}

_MODIFIERS = r'(?:(?:public|protected|private|static|readonly|var)\s+)+'
_TYPE = r'(?:\??[\w|\\]+\s+)?'
_DOC_TRANS = r'/\*\*\s*@trans\s*\*/'
_ATTR_TRANS = r'#\[\s*\\?(?:[\w\\]*\\)?Trans(?:\(\s*\))?\s*\]'
_OTHER_ATTRS = r'(?:#\[[^\]]*\]\s*)*'
# An inline marker must not be the leading annotation of the next declaration.
_NOT_LEADING = r'''(?!\s*(?:#\[|(?:public|protected|private|static|readonly|var)\s|\$\w+\s*=\s*(?:['"]|/\*\*)))'''

_LINE_COMMENT = re.compile(r'''(?<![:\\'"])//[^\n]*''')
_LINE_BREAKS = re.compile(r'\s*\n\s*')

_NOISE_PATTERNS = (
    re.compile(r'\d+'),                 # pure numbers
    re.compile(r'[a-zA-Z0-9_-]{1,3}'),  # very short codes
    re.compile(r'\w+\.\w+'),            # dotted keys / domain-like strings
    re.compile(r'#[0-9a-fA-F]{3,6}'),   # color codes
)


@dataclass(frozen=True)
class ExtractionPattern:
    """One compiled regex whose first group captures a quoted literal body."""
    regex: re.Pattern
    quote: str

    def unescape(self, raw: str) -> str:
        r"""Resolve ``\'``/``\"`` (for this pattern's quote) and ``\\``."""
        return re.sub(r'\\([\\' + re.escape(self.quote) + r'])', r'\1', raw)

    def finditer(self, content: str) -> Iterator[str]:
        for match in self.regex.finditer(content):
            yield self.unescape(match.group(1))


@dataclass(frozen=True)
class PatternRule:
    """A named category of extraction patterns."""
    name: str
    patterns: Tuple[ExtractionPattern, ...]
    normalized: bool = False
    skip_keys: bool = False

    def extract(self, content: str) -> Iterator[str]:
        """Yield every unescaped literal matched by this rule's patterns."""
        for pattern in self.patterns:
            yield from pattern.finditer(content)


def _compile(template: str) -> Tuple[ExtractionPattern, ...]:
    """Compile ``template`` once per quote style; ``LIT`` marks the literal."""
    return tuple(
        ExtractionPattern(
            regex=re.compile(template.replace('LIT', literal), re.DOTALL),
            quote=quote,
        )
        for quote, literal in _LITERALS.items()
    )


def function_call_rule(functions: Iterable[str] = DEFAULT_FUNCTIONS) -> PatternRule:
    """
    Build the function-call rule for the given helper names.

    Args:
        functions: Helper names such as ``__``, ``trans`` or ``@lang``

    Returns:
        PatternRule matching ``name('literal')`` followed by ``,`` or ``)``
    """
    patterns: Tuple[ExtractionPattern, ...] = ()
    for name in functions:
        template = r'(?<![\w$])' + re.escape(name) + r'\(\s*LIT\s*[,)]'
        patterns += _compile(template)
    return PatternRule(name=FUNCTION_CALL, patterns=patterns, skip_keys=True)


def annotated_property_rule() -> PatternRule:
    declaration = _MODIFIERS + _TYPE + r'\$\w+\s*=\s*'
    patterns = (
        # protected string $title = 'Hello' /** @trans */;
        _compile(declaration + r'LIT\s*;?\s*' + _DOC_TRANS + _NOT_LEADING)
        # /** @trans */ public string $title = 'Hello';
        + _compile(_DOC_TRANS + r'\s*' + _OTHER_ATTRS + declaration + r'LIT')
        # #[Trans] / #[Trans()] / #[Vendor\Trans] private string $title = 'Hello';
        + _compile(_ATTR_TRANS + r'\s*' + _OTHER_ATTRS + declaration + r'LIT')
    )
    return PatternRule(name=ANNOTATED_PROPERTY, patterns=patterns, normalized=True)


def annotated_variable_rule() -> PatternRule:
    patterns = (
        # $label = 'Hello' /** @trans */;
        _compile(r'\$\w+\s*=\s*LIT\s*;?\s*' + _DOC_TRANS + _NOT_LEADING)
        # $label = /** @trans */ 'Hello';
        + _compile(r'\$\w+\s*=\s*' + _DOC_TRANS + r'\s*LIT')
    )
    return PatternRule(name=ANNOTATED_VARIABLE, patterns=patterns, normalized=True)


def default_rules(functions: Iterable[str] = DEFAULT_FUNCTIONS) -> Tuple[PatternRule, ...]:
    """Return the standard rule set: function calls, properties, variables."""
    return (
        function_call_rule(functions),
        annotated_property_rule(),
        annotated_variable_rule(),
    )


DEFAULT_RULES = default_rules()


def normalize_content(content: str) -> str:
    """
    Flatten source for annotation matching.

    Single-line ``//`` comments are removed and every line break (with its
    surrounding whitespace) becomes one space. Multi-line literals are
    flattened as a side effect.
    """
    content = _LINE_COMMENT.sub('', content)
    return _LINE_BREAKS.sub(' ', content)


def is_structural_noise(text: str) -> bool:
    """True for numbers, short codes, ``word.word`` keys and hex colors."""
    return any(pattern.fullmatch(text) for pattern in _NOISE_PATTERNS)


def looks_like_key(text: str) -> bool:
    """Dotted text without spaces is a translation key, not a sentence."""
    return '.' in text and ' ' not in text


def extract_candidates(content: str, rules: Sequence[PatternRule] = DEFAULT_RULES) -> Set[str]:
    """
    Run ``rules`` over ``content`` and return the plausible strings.

    Applies the length, noise and key heuristics but no user-configured
    ignore rules.
    """
    found: Set[str] = set()
    normalized = None

    for rule in rules:
        if rule.normalized:
            if normalized is None:
                normalized = normalize_content(content)
            source = normalized
        else:
            source = content

        for text in rule.extract(source):
            if len(text.strip()) < MIN_STRING_LENGTH:
                continue
            if is_structural_noise(text):
                continue
            if rule.skip_keys and looks_like_key(text):
                continue
            found.add(text)

    return found

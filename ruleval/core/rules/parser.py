"""
Grammar parser for the rules language.

Consumes tokenized lines and builds a Ruleset. Example rules file:

    // settings
    allowed null values in ['NA', '-']
    thousands separator is '.'
    precision is 0,001

    column names in ['id', 'country', 'zipcode']
    all columns required
    no extra columns allowed

    column: 'id'
        has value type integer
        is unique

    conditional rule: 'welsh postcodes'
        if
            column: country is "WAL"
        then
            column: zipcode starts with "NP"

Parsing is all-or-nothing: the first problem raises ParseError with the line
number, and no partial Ruleset is ever returned.
"""

import re
from dataclasses import dataclass

from ruleval.core.errors import ParseError
from ruleval.core.models import RuleKind, Ruleset, ValueRule, ValueType
from ruleval.core.models.value_rule import VALUE_TYPE_ALIASES
from ruleval.core.schema import DateFormatCatalog, default_catalog, parse_number
from ruleval.observability.logger import get_logger

from .builder import RulesetBuilder
from .tokenizer import SourceLine, Token, TokenType, tokenize

logger = get_logger(__name__)

# Phrases followed by a string literal
_TEXT_RULES = (
    (("starts", "with"), RuleKind.STARTS_WITH),
    (("ends", "with"), RuleKind.ENDS_WITH),
    (("includes",), RuleKind.INCLUDES),
    (("excludes",), RuleKind.EXCLUDES_SUBSTRING),
)

# Phrases followed by a non-negative integer
_COUNT_RULES = (
    (("has", "length"), RuleKind.HAS_LENGTH),
    (("has", "min", "length"), RuleKind.MIN_LENGTH),
    (("has", "max", "length"), RuleKind.MAX_LENGTH),
    (("has", "significant", "digits"), RuleKind.SIGNIFICANT_DIGITS),
    (("has", "decimal", "places"), RuleKind.DECIMAL_PLACES),
)

# Phrases that take no argument; longest first
_BARE_RULES = (
    (("is", "not", "null"), RuleKind.IS_NOT_NULL),
    (("is", "required"), RuleKind.REQUIRED),
    (("is", "unique"), RuleKind.UNIQUE),
    (("is", "null"), RuleKind.IS_NULL),
)

_COMPARISONS = {
    "==": RuleKind.EQUALS_NUMBER,
    "!=": RuleKind.NOT_EQUALS_NUMBER,
    ">": RuleKind.GREATER_THAN,
    "<": RuleKind.LESS_THAN,
    ">=": RuleKind.GREATER_OR_EQUAL,
    "<=": RuleKind.LESS_OR_EQUAL,
}

_FLAGS = (
    (("all", "columns", "required"), "require_all_columns"),
    (("no", "extra", "columns", "allowed"), "forbid_extra_columns"),
    (("check", "column", "order"), "check_column_order"),
)


class _Cursor:
    """Read position within one source line."""

    def __init__(self, line: SourceLine):
        self.line = line
        self.tokens = line.tokens
        self.pos = 0

    def peek(self, offset: int = 0) -> Token | None:
        index = self.pos + offset
        return self.tokens[index] if index < len(self.tokens) else None

    def at_end(self) -> bool:
        return self.pos >= len(self.tokens)

    def error(self, reason: str) -> ParseError:
        return ParseError(self.line.number, reason, self.line.text)

    def peek_words(self, *words: str) -> bool:
        for offset, word in enumerate(words):
            token = self.peek(offset)
            if token is None or token.type is not TokenType.WORD or token.value.lower() != word:
                return False
        return True

    def accept_words(self, *words: str) -> bool:
        if self.peek_words(*words):
            self.pos += len(words)
            return True
        return False

    def accept(self, token_type: TokenType) -> Token | None:
        token = self.peek()
        if token is not None and token.type is token_type:
            self.pos += 1
            return token
        return None

    def expect(self, token_type: TokenType, what: str) -> Token:
        token = self.accept(token_type)
        if token is None:
            found = self.peek()
            found_text = f"'{found.value}'" if found else "end of line"
            raise self.error(f"expected {what}, found {found_text}")
        return token

    def expect_end(self) -> None:
        token = self.peek()
        if token is not None:
            raise self.error(f"unexpected '{token.value}' at column {token.column}")

    def remaining_words(self) -> list[str]:
        words = []
        while not self.at_end():
            words.append(self.expect(TokenType.WORD, "a word").value.lower())
        return words


@dataclass
class _PendingConditional:
    name: str
    line: int
    section: str | None = None
    antecedent: tuple[str, ValueRule] | None = None
    consequent: tuple[str, ValueRule] | None = None

    @property
    def complete(self) -> bool:
        return self.consequent is not None


class RulesetParser:
    """
    Parses rules-file text into a Ruleset.

    A parser instance is reusable; each call to parse() starts from a clean
    state.
    """

    def __init__(self, catalog: DateFormatCatalog | None = None):
        """
        Initialize the parser.

        Args:
            catalog: Date formats accepted by ``has format`` (defaults to the
                     packaged catalog)
        """
        self.catalog = catalog or default_catalog()

    def parse(self, source: str) -> Ruleset:
        """
        Parse rules-file text.

        Args:
            source: Complete rules-file text

        Returns:
            The compiled Ruleset

        Raises:
            ParseError: If the text is malformed or lacks the mandatory
                        ``column names in [...]`` declaration
        """
        self._builder = RulesetBuilder()
        if self.catalog is not default_catalog():
            self._builder.date_formats(*self.catalog.names)
        self._block: str | None = None
        self._conditional: _PendingConditional | None = None

        for line in tokenize(source):
            self._parse_line(_Cursor(line))

        if self._conditional is not None and not self._conditional.complete:
            raise ParseError(
                self._conditional.line,
                f"conditional rule '{self._conditional.name}' is missing its "
                f"'{'then' if self._conditional.antecedent else 'if'}' clause",
            )

        try:
            ruleset = self._builder.build()
        except ValueError as e:
            raise ParseError(None, str(e))

        logger.debug(
            f"Parsed ruleset: {len(ruleset.columns.names)} columns, "
            f"{len(ruleset.blocks)} column blocks, {len(ruleset.conditionals)} conditional rules"
        )
        return ruleset

    def _parse_line(self, cursor: _Cursor) -> None:
        if self._conditional is not None and not self._conditional.complete:
            self._parse_conditional_line(cursor)
            return

        if self._parse_statement(cursor):
            return

        if self._block is None:
            raise cursor.error("value rule outside a column block")

        rule = self._parse_value_rule(cursor)
        try:
            self._builder.add_rule(self._block, rule)
        except ValueError as e:
            raise cursor.error(str(e))

    # Top-level statements

    def _parse_statement(self, cursor: _Cursor) -> bool:
        """Handle a block-starting statement; False if the line is not one."""
        builder = self._builder
        handled = True

        try:
            if cursor.accept_words("column", "names", "in"):
                names = self._parse_list(cursor)
                if not all(isinstance(name, str) for name in names):
                    raise cursor.error("column names must be string literals")
                builder.column_names(*names)
            elif cursor.peek_words("column") and self._is_colon(cursor.peek(1)):
                cursor.pos += 2
                self._start_column_block(cursor)
                return True
            elif cursor.accept_words("conditional", "rule"):
                cursor.expect(TokenType.COLON, "':'")
                self._start_conditional(cursor)
                return True
            elif cursor.accept_words("allowed", "null", "values", "in"):
                values = self._parse_list(cursor)
                if not all(isinstance(value, str) for value in values):
                    raise cursor.error("null values must be string literals")
                builder.null_values(*values)
            elif cursor.accept_words("thousands", "separator", "is"):
                separator = cursor.expect(TokenType.STRING, "a quoted separator").value
                builder.thousands_separator(separator)
            elif cursor.accept_words("precision", "is") or cursor.accept_words("numeric", "precision", "is"):
                builder.precision(self._parse_number(cursor))
            else:
                for words, method in _FLAGS:
                    if cursor.accept_words(*words):
                        getattr(builder, method)()
                        break
                else:
                    handled = False
        except ValueError as e:
            raise cursor.error(str(e))

        if handled:
            cursor.expect_end()
            self._block = None
            self._conditional = None
        return handled

    def _start_column_block(self, cursor: _Cursor) -> None:
        name = self._parse_column_name(cursor)
        if not cursor.at_end():
            if self._conditional is not None:
                raise cursor.error(
                    f"conditional rule '{self._conditional.name}' takes exactly one clause per section"
                )
            raise cursor.error("a column block header takes only the column name")
        if self._builder.has_block(name):
            raise cursor.error(f"duplicate block for column '{name}'")

        self._builder.begin_column(name)
        self._block = name
        self._conditional = None

    def _start_conditional(self, cursor: _Cursor) -> None:
        name = self._parse_name(cursor, "a conditional rule name")
        cursor.expect_end()
        if self._builder.has_conditional(name):
            raise cursor.error(f"duplicate conditional rule name '{name}'")

        self._block = None
        self._conditional = _PendingConditional(name=name, line=cursor.line.number)

    # Conditional rules

    def _parse_conditional_line(self, cursor: _Cursor) -> None:
        pending = self._conditional

        if cursor.accept_words("if"):
            if pending.section is not None:
                raise cursor.error(f"conditional rule '{pending.name}' has more than one 'if'")
            pending.section = "if"
        elif cursor.accept_words("then"):
            if pending.antecedent is None:
                raise cursor.error(f"conditional rule '{pending.name}' needs an 'if' clause before 'then'")
            pending.section = "then"
        elif not (cursor.peek_words("column") and self._is_colon(cursor.peek(1))):
            raise cursor.error(
                f"expected 'if', 'then' or a 'column:' clause in conditional rule '{pending.name}'"
            )

        if cursor.at_end():
            return

        if pending.section is None:
            raise cursor.error(f"conditional rule '{pending.name}' must start with 'if'")
        if pending.section == "if" and pending.antecedent is not None:
            raise cursor.error(
                f"conditional rule '{pending.name}' takes exactly one clause per section; expected 'then'"
            )

        clause = self._parse_clause(cursor)
        if pending.section == "if":
            pending.antecedent = clause
            return

        pending.consequent = clause
        (if_column, if_rule), (then_column, then_rule) = pending.antecedent, pending.consequent
        self._builder.add_conditional(
            pending.name, if_column, if_rule, then_column, then_rule, line=pending.line
        )

    def _parse_clause(self, cursor: _Cursor) -> tuple[str, ValueRule]:
        if not cursor.accept_words("column"):
            raise cursor.error("expected a 'column:' clause")
        cursor.expect(TokenType.COLON, "':'")
        column = self._parse_column_name(cursor)
        if cursor.at_end():
            raise cursor.error(f"clause for column '{column}' is missing its rule")
        return column, self._parse_value_rule(cursor)

    # Value rules

    def _parse_value_rule(self, cursor: _Cursor) -> ValueRule:
        kind, argument = self._parse_rule_body(cursor)
        cursor.expect_end()
        try:
            return ValueRule(kind=kind, argument=argument, line=cursor.line.number)
        except ValueError as e:
            raise cursor.error(str(e))

    def _parse_rule_body(self, cursor: _Cursor):
        if cursor.accept_words("has", "value", "type"):
            return RuleKind.TYPE_IS, self._parse_value_type(cursor)

        if cursor.accept_words("has", "format"):
            name = cursor.expect(TokenType.STRING, "a quoted date format").value
            if name not in self.catalog:
                raise cursor.error(f"unsupported date format '{name}'")
            return RuleKind.FORMAT_IS, name

        for words, kind in _COUNT_RULES:
            if cursor.accept_words(*words):
                return kind, self._parse_count(cursor)

        for words, kind in _BARE_RULES:
            if cursor.accept_words(*words):
                return kind, None

        if cursor.accept_words("is", "not", "in"):
            return RuleKind.NOT_IN_SET, tuple(self._parse_list(cursor))
        if cursor.accept_words("is", "in"):
            return RuleKind.IN_SET, tuple(self._parse_list(cursor))
        if cursor.accept_words("is", "not"):
            return RuleKind.NOT_EQUALS_TEXT, cursor.expect(TokenType.STRING, "a quoted string").value
        if cursor.accept_words("is"):
            operator = cursor.accept(TokenType.OPERATOR)
            if operator is not None:
                return _COMPARISONS[operator.value], self._parse_number(cursor)
            return RuleKind.EQUALS_TEXT, cursor.expect(TokenType.STRING, "a quoted string or comparison").value

        if cursor.accept_words("matches"):
            cursor.accept_words("pattern")
            token = cursor.expect(TokenType.PATTERN, "a /pattern/")
            try:
                return RuleKind.MATCHES_PATTERN, re.compile(token.value)
            except re.error as e:
                raise cursor.error(f"invalid regular expression /{token.value}/: {e}")

        for words, kind in _TEXT_RULES:
            if cursor.accept_words(*words):
                return kind, cursor.expect(TokenType.STRING, "a quoted string").value

        raise cursor.error("unrecognized rule")

    def _parse_value_type(self, cursor: _Cursor) -> ValueType:
        name = " ".join(cursor.remaining_words())
        if name in VALUE_TYPE_ALIASES:
            return VALUE_TYPE_ALIASES[name]
        try:
            return ValueType(name)
        except ValueError:
            valid = ", ".join(value_type.value for value_type in ValueType)
            raise cursor.error(f"unknown value type '{name}' (expected one of: {valid})")

    # Literals

    def _parse_column_name(self, cursor: _Cursor) -> str:
        return self._parse_name(cursor, "a column name")

    def _parse_name(self, cursor: _Cursor, what: str) -> str:
        token = cursor.accept(TokenType.STRING) or cursor.accept(TokenType.WORD)
        if token is None:
            raise cursor.error(f"expected {what}")
        if not token.value:
            raise cursor.error(f"{what} cannot be empty")
        return token.value

    def _parse_number(self, cursor: _Cursor) -> float:
        token = cursor.expect(TokenType.NUMBER, "a number")
        parsed = parse_number(token.value, self._builder.settings)
        if parsed is None:
            raise cursor.error(f"invalid number literal '{token.value}'")
        return parsed[0]

    def _parse_count(self, cursor: _Cursor) -> int:
        token = cursor.expect(TokenType.NUMBER, "a whole number")
        parsed = parse_number(token.value, self._builder.settings, ValueType.INTEGER)
        if parsed is None or parsed[0] < 0:
            raise cursor.error(f"expected a non-negative whole number, found '{token.value}'")
        return parsed[0]

    def _parse_list(self, cursor: _Cursor) -> list:
        cursor.expect(TokenType.LBRACKET, "'['")
        items: list = []
        if cursor.accept(TokenType.RBRACKET):
            return items

        while True:
            token = cursor.accept(TokenType.STRING)
            if token is not None:
                items.append(token.value)
            else:
                items.append(self._parse_number(cursor))
            if cursor.accept(TokenType.RBRACKET):
                return items
            cursor.expect(TokenType.COMMA, "',' or ']'")

    @staticmethod
    def _is_colon(token: Token | None) -> bool:
        return token is not None and token.type is TokenType.COLON


def parse_ruleset(source: str, catalog: DateFormatCatalog | None = None) -> Ruleset:
    """Parse rules-file text into a Ruleset (see RulesetParser.parse)."""
    return RulesetParser(catalog).parse(source)

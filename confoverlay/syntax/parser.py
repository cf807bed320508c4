from typing import List, NotRequired, Optional, TypedDict
from dataclasses import dataclass
from confoverlay.diagnostics import Diagnostic, DiagnosticCode, Diagnostics
from confoverlay.logger import Logger
from confoverlay.pos import Pos, Range
from confoverlay.syntax.lexer import ConfigLexer, LexerError, Token, TokenType
from confoverlay.syntax.nodes import SyntaxAttribute, SyntaxBlock, SyntaxBody
from confoverlay.utils import resolve_config


class ParseException(Exception):
    def __init__(self, message: str, token: Optional[Token] = None, detail: str = ""):
        self.message = message
        self.token = token
        self.detail = detail
        if token:
            message = f"{message} at line {token.start.line}, column {token.start.column}"
        super().__init__(message)


class ParserConfig(TypedDict):
    enable_logger: NotRequired[bool]
    filename: NotRequired[str]


class ParserConfigRequired(TypedDict):
    enable_logger: bool
    filename: str


DEFAULT_CONFIG: ParserConfigRequired = {"enable_logger": False, "filename": ""}

LITERAL_TYPES = {TokenType.STRING, TokenType.NUMBER, TokenType.BOOLEAN}


@dataclass
class ConfigFile:
    body: SyntaxBody
    filename: str = ""


class ConfigParser:
    def __init__(self, tokens: List[Token], config: Optional[ParserConfig] = None):
        self.config = resolve_config(config or {}, DEFAULT_CONFIG)
        self.logger = Logger(config={"name": "confoverlay.parser", "is_enabled": self.config["enable_logger"]}).logger
        self.filename = self.config["filename"]
        self.tokens = tokens
        self.position = 0

    @property
    def current_token(self) -> Token:
        return self.tokens[self.position]

    def advance(self) -> None:
        self.position = min(self.position + 1, len(self.tokens) - 1)

    def expect(self, expected_type: TokenType | List[TokenType], message: str) -> None:
        if not isinstance(expected_type, list):
            expected_type = [expected_type]
        if self.current_token.type not in expected_type:
            raise ParseException(message, self.current_token, self._describe(self.current_token))

    def consume(self, expected_type: TokenType | List[TokenType], message: str) -> Token:
        current_token = self.current_token
        self.expect(expected_type, message)
        self.advance()
        self.logger.debug(f"Consumed token {current_token}")
        return current_token

    def parse(self) -> ConfigFile:
        self.logger.info("Parsing configuration")
        start = self.current_token.start
        body = self._parse_body(start, closing=TokenType.EOF)
        eof = self.current_token
        body.end_range = self._range(eof.start, eof.end)
        self.logger.info("Parsing complete")
        return ConfigFile(body=body, filename=self.filename)

    def _parse_body(self, start: Pos, closing: TokenType) -> SyntaxBody:
        body = SyntaxBody()
        while self.current_token.type != closing:
            if self.current_token.type == TokenType.EOF:
                raise ParseException("Unclosed configuration block", self.current_token, "Expected a closing brace.")
            name_token = self.consume(TokenType.IDENTIFIER, "Argument or block definition required")
            if self.current_token.type == TokenType.EQUALS:
                attr = self._parse_attribute(name_token)
                if attr.name in body.attributes:
                    previous = body.attributes[attr.name].name_range
                    raise ParseException(
                        "Attribute redefined",
                        name_token,
                        f'The argument "{attr.name}" was already set at {previous}. '
                        "Each argument may be set only once.",
                    )
                body.attributes[attr.name] = attr
            else:
                body.blocks.append(self._parse_block(name_token))
        body.src_range = self._range(start, self.current_token.end)
        return body

    def _parse_attribute(self, name_token: Token) -> SyntaxAttribute:
        self.consume(TokenType.EQUALS, "Missing equals sign")
        value_token = self.consume(list(LITERAL_TYPES), "Invalid expression")
        return SyntaxAttribute(
            name=str(name_token.value),
            value=value_token.value,  # type: ignore[arg-type]
            range=self._range(name_token.start, value_token.end),
            name_range=self._range(name_token.start, name_token.end),
            value_range=self._range(value_token.start, value_token.end),
        )

    def _parse_block(self, type_token: Token) -> SyntaxBlock:
        labels: list[str] = []
        label_ranges: list[Range] = []
        while self.current_token.type in {TokenType.STRING, TokenType.IDENTIFIER}:
            label = self.consume([TokenType.STRING, TokenType.IDENTIFIER], "Invalid block label")
            labels.append(str(label.value))
            label_ranges.append(self._range(label.start, label.end))
        open_brace = self.consume(TokenType.OPEN_BRACE, "Invalid block definition")
        body = self._parse_body(open_brace.start, closing=TokenType.CLOSE_BRACE)
        close_brace = self.consume(TokenType.CLOSE_BRACE, "Invalid block definition")
        body.end_range = self._range(close_brace.start, close_brace.end)
        self.logger.debug(f"Parsed block {type_token.value} {labels}")
        return SyntaxBlock(
            type=str(type_token.value),
            labels=labels,
            body=body,
            type_range=self._range(type_token.start, type_token.end),
            label_ranges=label_ranges,
            open_brace_range=self._range(open_brace.start, open_brace.end),
        )

    def _range(self, start: Pos, end: Pos) -> Range:
        return Range(self.filename, start, end)

    def _describe(self, token: Token) -> str:
        if token.type == TokenType.EOF:
            return "Unexpected end of file."
        return f"Unexpected {token.type.name.lower().replace('_', ' ')} {token.value!r}."


def parse_config(
    text: str, filename: str = "", parser_config: Optional[ParserConfig] = None
) -> tuple[Optional[ConfigFile], Diagnostics]:
    """Parse configuration source text.

    Syntax errors are returned as diagnostics, in which case there is no file.
    """
    config = resolve_config(parser_config or {}, DEFAULT_CONFIG)
    config["filename"] = filename or config["filename"]
    diags = Diagnostics()
    try:
        tokens = ConfigLexer(text, config={"enable_logger": config["enable_logger"]}).tokenize()
        return ConfigParser(tokens, config=config).parse(), diags
    except LexerError as e:
        diags.append(
            Diagnostic.error(
                "Invalid character" if e.message.startswith("Unexpected") else "Invalid syntax",
                f"{e.message}.",
                subject=Range(config["filename"], e.pos, e.pos),
                code=DiagnosticCode.SYNTAX_ERROR,
            )
        )
    except ParseException as e:
        subject = Range(config["filename"], e.token.start, e.token.end) if e.token else None
        diags.append(Diagnostic.error(e.message, e.detail, subject=subject, code=DiagnosticCode.SYNTAX_ERROR))
    return None, diags


def parse_config_file(path: str, parser_config: Optional[ParserConfig] = None) -> tuple[Optional[ConfigFile], Diagnostics]:
    try:
        with open(path, "r", encoding="utf-8") as handle:
            text = handle.read()
    except OSError as e:
        diags = Diagnostics()
        diags.append(
            Diagnostic.error(
                "Failed to read file",
                f"The configuration file {path!r} could not be read: {e.strerror or e}.",
                code=DiagnosticCode.SYNTAX_ERROR,
            )
        )
        return None, diags
    return parse_config(text, filename=path, parser_config=parser_config)

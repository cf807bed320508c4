"""A small block-structured configuration syntax implementing the body protocol."""

from .lexer import ConfigLexer, LexerConfig, LexerError, Token, TokenType
from .nodes import SyntaxAttribute, SyntaxBlock, SyntaxBody
from .parser import ConfigFile, ConfigParser, ParseException, ParserConfig, parse_config, parse_config_file

__all__ = [
    "ConfigLexer",
    "LexerConfig",
    "LexerError",
    "Token",
    "TokenType",
    "SyntaxAttribute",
    "SyntaxBlock",
    "SyntaxBody",
    "ConfigFile",
    "ConfigParser",
    "ParseException",
    "ParserConfig",
    "parse_config",
    "parse_config_file",
]

"""
Abstract Syntax Tree (AST) Node Definitions for uGo

Defines the structure of AST nodes consumed by the IR generator. The parser
that builds these trees lives outside this package.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Union


class Token:
    """Operator spellings used by the AST"""
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"

    EQL = "=="
    NEQ = "!="
    LSS = "<"
    LEQ = "<="
    GTR = ">"
    GEQ = ">="

    ASSIGN = "="
    DEFINE = ":="


ARITH_OPS = (Token.ADD, Token.SUB, Token.MUL, Token.DIV)
COMPARE_OPS = (Token.EQL, Token.NEQ, Token.LSS, Token.LEQ, Token.GTR, Token.GEQ)
BINARY_OPS = ARITH_OPS + COMPARE_OPS
UNARY_OPS = (Token.SUB, Token.ADD)
ASSIGN_OPS = (Token.ASSIGN, Token.DEFINE)


@dataclass
class ASTNode:
    """Base class for all AST nodes"""
    # Source offset reported by the lexer; 0 when unknown. Required so that
    # subclasses' non-default fields don't follow defaults.
    pos: int


# ============== Expression Nodes ==============

@dataclass
class Ident(ASTNode):
    """Name reference"""
    name: str


@dataclass
class Number(ASTNode):
    """Integer literal"""
    value: int


@dataclass
class BinaryOp(ASTNode):
    """Binary operation"""
    op: str  # one of BINARY_OPS
    left: 'Expr'
    right: 'Expr'


@dataclass
class UnaryOp(ASTNode):
    """Unary operation"""
    op: str  # '-' (negate) or '+' (identity)
    operand: 'Expr'


@dataclass
class ParenExpr(ASTNode):
    """Parenthesized expression"""
    expr: 'Expr'


@dataclass
class Call(ASTNode):
    """Function call"""
    func: Ident
    args: List['Expr'] = field(default_factory=list)


Expr = Union[Ident, Number, BinaryOp, UnaryOp, ParenExpr, Call]


# ============== Statement Nodes ==============

@dataclass
class VarDecl(ASTNode):
    """`var name = value`; pos is the declaration site"""
    name: str
    value: Optional[Expr] = None


@dataclass
class Assign(ASTNode):
    """`a, b = x, y` or `a, b := x, y`"""
    targets: List[Ident]
    values: List[Expr]
    op: str = Token.ASSIGN


@dataclass
class Block(ASTNode):
    """Braced statement list"""
    stmts: List['Stmt'] = field(default_factory=list)


@dataclass
class For(ASTNode):
    """For loop"""
    body: 'Stmt'
    init: Optional['Stmt'] = None
    cond: Optional[Expr] = None
    post: Optional['Stmt'] = None


@dataclass
class ExprStmt(ASTNode):
    """Expression evaluated for its side effects"""
    expr: Expr


Stmt = Union[VarDecl, Assign, For, Block, ExprStmt]


# ============== Top-level Nodes ==============

@dataclass
class GlobalDecl(ASTNode):
    """Package-level variable"""
    name: str
    value: Optional[Expr] = None


@dataclass
class FuncDecl(ASTNode):
    """Function declaration/definition"""
    name: str
    body: Optional[Block] = None  # None if only declaration


@dataclass
class File(ASTNode):
    """One source file of a package"""
    package: str
    globals: List[GlobalDecl] = field(default_factory=list)
    funcs: List[FuncDecl] = field(default_factory=list)

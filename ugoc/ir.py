"""ugoc.ir

LLVM IR generation for uGo.

`IRGenerator` walks a `File` once, depth first, and emits textual LLVM IR:

- one `global i32` per package variable
- one `define i32 @...()` per function (or `declare` when there is no body)
- locals as `alloca` slots at the top of their function
- a package initializer that stores the globals' initial values
- a `@main` shim when compiling the entry package

Every expression produces an `i32` value reference (`%t0`, `%t1`, ...).
Comparisons are computed as `i1` and widened with `zext` so that callers never
see a narrower value. Temporaries and labels draw from one counter, so all
generated names in a module are distinct.

Name resolution goes through `ugoc.scope`; an unresolved name aborts the whole
compilation with `UnresolvedSymbolError`.
"""

from __future__ import annotations

from typing import List, Optional, Set

from ugoc import builtin
from ugoc.ast_nodes import (
    File,
    FuncDecl,
    VarDecl,
    Assign,
    For,
    Block,
    ExprStmt,
    Ident,
    Number,
    BinaryOp,
    UnaryOp,
    ParenExpr,
    Call,
    Stmt,
    Expr,
    Token,
    BINARY_OPS,
    UNARY_OPS,
    ASSIGN_OPS,
)
from ugoc.scope import Object, Scope, universe


_ARITH = {
    Token.ADD: "add",
    Token.SUB: "sub",
    Token.MUL: "mul",
    Token.DIV: "sdiv",
}

# https://llvm.org/docs/LangRef.html#icmp-instruction
_ICMP = {
    Token.EQL: "eq",
    Token.NEQ: "ne",
    Token.LSS: "slt",
    Token.LEQ: "sle",
    Token.GTR: "sgt",
    Token.GEQ: "sge",
}


class CompileError(Exception):
    """IR generation error"""

    def __init__(self, message: str, decl: Optional[str] = None):
        self.decl = decl
        if decl:
            message = f"{message} (in {decl})"
        super().__init__(message)


class UnresolvedSymbolError(CompileError):
    """A name is not bound anywhere in the visible scope chain"""

    def __init__(self, name: str, kind: str = "var", decl: Optional[str] = None):
        self.name = name
        self.kind = kind
        super().__init__(f"{kind} {name} undefined", decl)


class UnsupportedConstructError(CompileError):
    """An AST node or operator the generator cannot lower"""

    def __init__(self, node: object, detail: str = "", decl: Optional[str] = None):
        self.node = node
        msg = f"unsupported {type(node).__name__}"
        if detail:
            msg += f": {detail}"
        super().__init__(msg, decl)


class IRGenerator:
    """Generates LLVM IR text from a uGo AST"""

    def __init__(self, main_package: str = "main", prefix: str = "ugo"):
        self.main_package = main_package
        self.prefix = prefix
        self.lines: List[str] = []
        self.scope: Optional[Scope] = None
        self.next_id = 0
        # Declaration being lowered, reported in error messages.
        self._decl: Optional[str] = None
        # Stack slots of the function being lowered; written after `define`.
        self._allocas: List[str] = []
        self._slots: Set[str] = set()

    def generate(self, file: File) -> str:
        """Generate IR for one file"""
        self.lines = []
        self.scope = universe()
        self.next_id = 0
        self._decl = None

        self._gen_header(file)
        self._gen_file(file)
        self._gen_main(file)

        return "\n".join(self.lines) + "\n"

    # -------------
    # Helpers
    # -------------

    def _emit(self, line: str) -> None:
        self.lines.append(line)

    def _enter_scope(self) -> None:
        self.scope = Scope.new_child(self.scope)

    def _leave_scope(self) -> None:
        self.scope = self.scope.outer

    def _new_temp(self) -> str:
        t = f"%t{self.next_id}"
        self.next_id += 1
        return t

    def _new_label(self, tag: str) -> str:
        l = f"{tag}.{self.next_id}"
        self.next_id += 1
        return l

    def _global_name(self, file: File, name: str) -> str:
        return f"@{self.prefix}_{file.package}_{name}"

    def _new_slot(self, name: str, pos: int) -> str:
        """Reserve a stack slot in the function prologue."""
        mangled = f"%local_{name}.pos.{pos}"
        if mangled in self._slots:
            # same name at the same position, e.g. nodes without a position
            mangled = f"{mangled}.{self.next_id}"
            self.next_id += 1
        self._slots.add(mangled)
        self._allocas.append(f"\t{mangled} = alloca i32, align 4")
        return mangled

    def _declare_global(self, obj: Object) -> None:
        if obj.name == "init":
            raise self._unsupported(obj.node, "init is the package initializer")
        if self.scope.declare(obj) is not obj:
            raise self._unsupported(obj.node, f"{obj.name} redeclared in package")

    def _resolve(self, name: str, kind: str = "var") -> Object:
        obj = self.scope.lookup(name)
        if obj is None:
            raise UnresolvedSymbolError(name, kind, self._decl)
        return obj

    def _unsupported(self, node: object, detail: str = "") -> UnsupportedConstructError:
        return UnsupportedConstructError(node, detail, self._decl)

    # -------------
    # File
    # -------------

    def _gen_header(self, file: File) -> None:
        self._emit(f"; package {file.package}")
        self._emit(builtin.HEADER.strip("\n"))
        self._emit("")

    def _gen_main(self, file: File) -> None:
        if file.package != self.main_package:
            return
        for fn in file.funcs:
            if fn.name == "main":
                self._emit(
                    builtin.main_main(
                        init=self._global_name(file, "init"),
                        main=self._global_name(file, "main"),
                    ).rstrip("\n")
                )
                return

    def _gen_file(self, file: File) -> None:
        self._enter_scope()
        try:
            for g in file.globals:
                mangled = self._global_name(file, g.name)
                self._declare_global(Object(name=g.name, mangled_name=mangled, node=g))
                self._emit(f"{mangled} = global i32 0")
            if file.globals:
                self._emit("")

            for fn in file.funcs:
                self._gen_function(file, fn)

            self._gen_init(file)
        finally:
            self._leave_scope()

    def _gen_init(self, file: File) -> None:
        self._emit(f"define i32 {self._global_name(file, 'init')}() {{")
        for g in file.globals:
            self._decl = f"var {g.name}"
            value = "0"
            if g.value is not None:
                value = self._gen_expr(g.value)
            target = self._resolve(g.name)
            self._emit(f"\tstore i32 {value}, ptr {target.mangled_name}")
        self._decl = None
        self._emit("\tret i32 0")
        self._emit("}")

    # -------------
    # Functions
    # -------------

    def _gen_function(self, file: File, fn: FuncDecl) -> None:
        mangled = self._global_name(file, fn.name)
        # Bound in the file scope so later functions and the body itself can call it.
        self._declare_global(Object(name=fn.name, mangled_name=mangled, node=fn))

        if fn.body is None:
            self._emit(f"declare i32 {mangled}()")
            self._emit("")
            return

        self._decl = f"func {fn.name}"
        self._allocas = []
        self._slots = set()
        self._enter_scope()
        try:
            self._emit(f"define i32 {mangled}() {{")
            prologue = len(self.lines)
            for stmt in fn.body.stmts:
                self._gen_stmt(stmt)
            # slots are allocated once, in the entry block
            self.lines[prologue:prologue] = self._allocas
            self._emit("\tret i32 0")
            self._emit("}")
            self._emit("")
        finally:
            self._leave_scope()
        self._decl = None

    # -------------
    # Statements
    # -------------

    def _gen_stmt(self, stmt: Stmt) -> None:
        if isinstance(stmt, VarDecl):
            value = "0"
            if stmt.value is not None:
                value = self._gen_expr(stmt.value)
            mangled = self._new_slot(stmt.name, stmt.pos)
            self.scope.declare(Object(name=stmt.name, mangled_name=mangled, node=stmt))
            self._emit(f"\tstore i32 {value}, ptr {mangled}")
            return

        if isinstance(stmt, Assign):
            self._gen_assign(stmt)
            return

        if isinstance(stmt, For):
            self._gen_for(stmt)
            return

        if isinstance(stmt, Block):
            self._enter_scope()
            try:
                for item in stmt.stmts:
                    self._gen_stmt(item)
            finally:
                self._leave_scope()
            return

        if isinstance(stmt, ExprStmt):
            self._gen_expr(stmt.expr)
            return

        raise self._unsupported(stmt)

    def _gen_assign(self, stmt: Assign) -> None:
        if stmt.op not in ASSIGN_OPS:
            raise self._unsupported(stmt, f"assignment operator {stmt.op!r}")
        if len(stmt.targets) != len(stmt.values):
            raise self._unsupported(
                stmt, f"{len(stmt.targets)} targets but {len(stmt.values)} values"
            )

        values = [self._gen_expr(v) for v in stmt.values]

        if stmt.op == Token.DEFINE:
            # Only names unknown to the whole chain get a new slot; a name bound
            # in an enclosing scope is assigned, not shadowed.
            for target in stmt.targets:
                if self.scope.lookup(target.name) is None:
                    mangled = self._new_slot(target.name, target.pos)
                    self.scope.declare(Object(name=target.name, mangled_name=mangled, node=target))

        for target, value in zip(stmt.targets, values):
            obj = self._resolve(target.name)
            self._emit(f"\tstore i32 {value}, ptr {obj.mangled_name}")

    def _gen_for(self, stmt: For) -> None:
        self._enter_scope()
        try:
            tag = f"pos{stmt.pos}"
            for_init = self._new_label(f"for.init.{tag}")
            for_cond = self._new_label(f"for.cond.{tag}")
            for_body = self._new_label(f"for.body.{tag}")
            for_end = self._new_label(f"for.end.{tag}")

            # close the current block
            self._emit(f"\tbr label %{for_init}")

            self._emit("")
            self._emit(f"{for_init}:")
            if stmt.init is not None:
                self._gen_stmt(stmt.init)
            self._emit(f"\tbr label %{for_cond}")

            self._emit("")
            self._emit(f"{for_cond}:")
            if stmt.cond is not None:
                value = self._gen_expr(stmt.cond)
                cond = self._new_temp()
                self._emit(f"\t{cond} = icmp ne i32 {value}, 0")
                self._emit(f"\tbr i1 {cond}, label %{for_body}, label %{for_end}")
            else:
                self._emit(f"\tbr label %{for_body}")

            self._emit("")
            self._emit(f"{for_body}:")
            self._enter_scope()
            try:
                self._gen_stmt(stmt.body)
            finally:
                self._leave_scope()

            if stmt.post is not None:
                self._gen_stmt(stmt.post)
            self._emit(f"\tbr label %{for_cond}")

            self._emit("")
            self._emit(f"{for_end}:")
        finally:
            self._leave_scope()

    # -------------
    # Expressions
    # -------------

    def _gen_expr(self, expr: Expr) -> str:
        if isinstance(expr, Ident):
            obj = self._resolve(expr.name)
            t = self._new_temp()
            self._emit(f"\t{t} = load i32, ptr {obj.mangled_name}, align 4")
            return t

        if isinstance(expr, Number):
            t = self._new_temp()
            self._emit(f"\t{t} = add i32 0, {int(expr.value)}")
            return t

        if isinstance(expr, BinaryOp):
            if expr.op not in BINARY_OPS:
                raise self._unsupported(expr, f"binary operator {expr.op!r}")
            left = self._gen_expr(expr.left)
            right = self._gen_expr(expr.right)
            if expr.op in _ARITH:
                t = self._new_temp()
                self._emit(f"\t{t} = {_ARITH[expr.op]} i32 {left}, {right}")
                return t
            flag = self._new_temp()
            self._emit(f"\t{flag} = icmp {_ICMP[expr.op]} i32 {left}, {right}")
            t = self._new_temp()
            self._emit(f"\t{t} = zext i1 {flag} to i32")
            return t

        if isinstance(expr, UnaryOp):
            if expr.op not in UNARY_OPS:
                raise self._unsupported(expr, f"unary operator {expr.op!r}")
            if expr.op == Token.SUB:
                operand = self._gen_expr(expr.operand)
                t = self._new_temp()
                self._emit(f"\t{t} = sub i32 0, {operand}")
                return t
            return self._gen_expr(expr.operand)

        if isinstance(expr, ParenExpr):
            return self._gen_expr(expr.expr)

        if isinstance(expr, Call):
            fn = self._resolve(expr.func.name, "func")
            if len(expr.args) != 1:
                raise self._unsupported(
                    expr, f"call to {expr.func.name} with {len(expr.args)} arguments"
                )
            arg = self._gen_expr(expr.args[0])
            t = self._new_temp()
            self._emit(f"\t{t} = call i32 (i32) {fn.mangled_name}(i32 {arg})")
            return t

        raise self._unsupported(expr)

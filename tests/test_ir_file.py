from ugoc.ast_nodes import File, GlobalDecl, FuncDecl, Block, ExprStmt, Number, Call, Ident
from ugoc.ir import IRGenerator


def _body(ir: str, fn: str) -> list:
    """Instruction lines of `define i32 <fn>() { ... }`."""
    lines = ir.splitlines()
    start = lines.index(f"define i32 {fn}() {{")
    end = lines.index("}", start)
    return [l.strip() for l in lines[start + 1:end] if l.strip()]


def test_header_names_package_and_builtins():
    ir = IRGenerator().generate(File(0, "main"))
    lines = ir.splitlines()
    assert lines[0] == "; package main"
    assert "declare i32 @ugo_builtin_println(i32)" in lines
    assert "declare i32 @ugo_builtin_exit(i32)" in lines


def test_empty_function_only_returns_zero():
    f = File(0, "main", funcs=[FuncDecl(1, "main", Block(2))])
    ir = IRGenerator().generate(f)

    assert _body(ir, "@ugo_main_main") == ["ret i32 0"]
    init = _body(ir, "@ugo_main_init")
    assert init == ["ret i32 0"]
    assert not any(l.startswith("store") for l in init)


def test_globals_are_zero_slots_and_set_by_init():
    f = File(
        0,
        "pkg",
        globals=[GlobalDecl(1, "a", Number(5, 7)), GlobalDecl(8, "b")],
    )
    ir = IRGenerator().generate(f)

    assert "@ugo_pkg_a = global i32 0" in ir
    assert "@ugo_pkg_b = global i32 0" in ir
    assert _body(ir, "@ugo_pkg_init") == [
        "%t0 = add i32 0, 7",
        "store i32 %t0, ptr @ugo_pkg_a",
        "store i32 0, ptr @ugo_pkg_b",
        "ret i32 0",
    ]


def test_global_initializer_sees_earlier_global():
    f = File(
        0,
        "main",
        globals=[GlobalDecl(1, "a", Number(5, 2)), GlobalDecl(8, "b", Ident(12, "a"))],
    )
    init = _body(IRGenerator().generate(f), "@ugo_main_init")
    assert "%t1 = load i32, ptr @ugo_main_a, align 4" in init
    assert "store i32 %t1, ptr @ugo_main_b" in init


def test_function_without_body_is_declared():
    f = File(0, "main", funcs=[FuncDecl(1, "ext")])
    ir = IRGenerator().generate(f)
    assert "declare i32 @ugo_main_ext()" in ir
    assert "define i32 @ugo_main_ext()" not in ir


def test_recursive_and_forward_calls_resolve():
    f = File(
        0,
        "main",
        funcs=[
            FuncDecl(1, "ext"),
            FuncDecl(10, "f", Block(12, [
                ExprStmt(14, Call(14, Ident(14, "f"), [Number(16, 1)])),
                ExprStmt(20, Call(20, Ident(20, "ext"), [Number(24, 2)])),
            ])),
        ],
    )
    body = _body(IRGenerator().generate(f), "@ugo_main_f")
    assert "%t1 = call i32 (i32) @ugo_main_f(i32 %t0)" in body
    assert "%t3 = call i32 (i32) @ugo_main_ext(i32 %t2)" in body


def test_main_shim_for_entry_package():
    f = File(0, "main", funcs=[FuncDecl(1, "main", Block(2))])
    ir = IRGenerator().generate(f)
    assert _body(ir, "@main") == [
        "call i32 @ugo_main_init()",
        "call i32 @ugo_main_main()",
        "ret i32 0",
    ]


def test_no_main_shim_without_main_func():
    f = File(0, "main", funcs=[FuncDecl(1, "helper", Block(2))])
    assert "define i32 @main()" not in IRGenerator().generate(f)


def test_no_main_shim_outside_entry_package():
    f = File(0, "lib", funcs=[FuncDecl(1, "main", Block(2))])
    ir = IRGenerator().generate(f)
    assert "define i32 @ugo_lib_main()" in ir
    assert "define i32 @main()" not in ir


def test_entry_package_and_prefix_are_configurable():
    f = File(0, "app", funcs=[FuncDecl(1, "main", Block(2))])
    ir = IRGenerator(main_package="app", prefix="x").generate(f)
    assert "define i32 @x_app_main()" in ir
    assert "call i32 @x_app_init()" in ir


def test_counter_restarts_per_generate():
    f = File(0, "main", globals=[GlobalDecl(1, "a", Number(5, 3))])
    gen = IRGenerator()
    first = gen.generate(f)
    second = gen.generate(f)
    assert first == second
    assert "%t0 = add i32 0, 3" in second


def test_separate_generators_do_not_share_state():
    f = File(0, "main", globals=[GlobalDecl(1, "a", Number(5, 3))])
    a = IRGenerator()
    b = IRGenerator()
    a.generate(f)
    assert a.next_id == 1
    assert b.next_id == 0
    assert b.generate(f) == a.generate(f)

"""ugoc.builtin

Fixed IR text shared by every compiled package: the builtin declarations
placed at the top of each module, the runtime that defines those builtins,
and the `main` shim for the entry package.

The runtime is a separate LLVM module; the driver hands it to clang next to
the generated module so the header's `declare`s resolve at link time.
"""

# name -> storage name, bound in the universe scope
BUILTINS = {
    "println": "@ugo_builtin_println",
    "exit": "@ugo_builtin_exit",
}

HEADER = """
declare i32 @ugo_builtin_println(i32)
declare i32 @ugo_builtin_exit(i32)

"""

RUNTIME = r"""; ugo runtime
declare i32 @printf(ptr, ...)
declare void @exit(i32)

@.ugo_builtin_int_fmt = private unnamed_addr constant [4 x i8] c"%d\0A\00"

define i32 @ugo_builtin_println(i32 %x) {
	%r = call i32 (ptr, ...) @printf(ptr @.ugo_builtin_int_fmt, i32 %x)
	ret i32 0
}

define i32 @ugo_builtin_exit(i32 %x) {
	call void @exit(i32 %x)
	ret i32 0
}
"""

MAIN_MAIN = """
define i32 @main() {{
	call i32 {init}()
	call i32 {main}()
	ret i32 0
}}
"""


def main_main(init: str, main: str) -> str:
    """Entry-point shim: run the package initializer, then `main`."""
    return MAIN_MAIN.format(init=init, main=main)

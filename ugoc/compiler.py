"""
Main Compiler Driver

Runs IR generation for a parsed file and, optionally, hands the result to
clang to build an executable.
"""

from __future__ import annotations

from typing import Optional, List
from dataclasses import dataclass
import logging
import os
import shutil
import subprocess
import tempfile

from ugoc import builtin
from ugoc.ast_nodes import File
from ugoc.ir import IRGenerator

logger = logging.getLogger(__name__)


@dataclass
class CompilationResult:
    """Result of compilation"""
    success: bool
    output_file: Optional[str] = None
    errors: List[str] = None
    ir: Optional[str] = None

    def __post_init__(self):
        if self.errors is None:
            self.errors = []


class Compiler:
    """Main compiler class orchestrating IR generation and the backend build"""

    def __init__(
        self,
        *,
        main_package: str = "main",
        prefix: str = "ugo",
        with_runtime: bool = True,
    ):
        self.main_package = main_package
        self.prefix = prefix
        self.with_runtime = with_runtime

        # Toolchain defaults.
        self.clang = os.environ.get("UGOC_CLANG", "clang")

    def compile_ast(self, file: File, output_file: Optional[str] = None) -> CompilationResult:
        """Compile a parsed file.

        If output_file endswith:
        - .ll : write the LLVM IR
        - otherwise: build an executable with clang
        Without output_file only the IR is produced.
        """
        try:
            ir = self.get_ir(file)
        except Exception as e:
            logger.debug("IR generation failed for package %s: %s", file.package, e)
            return CompilationResult(success=False, errors=[f"IR generation failed: {e}"])

        if output_file:
            if os.path.splitext(output_file)[1] == ".ll":
                try:
                    with open(output_file, "w", encoding="utf-8") as f:
                        f.write(ir)
                except IOError as e:
                    return CompilationResult(success=False, ir=ir, errors=[f"Failed to write output file: {e}"])
            else:
                try:
                    self.build(ir, output_file)
                except (IOError, RuntimeError, subprocess.CalledProcessError) as e:
                    detail = getattr(e, "stderr", None)
                    msg = f"Build failed: {e}"
                    if detail:
                        msg += f"\n{detail}"
                    return CompilationResult(success=False, ir=ir, errors=[msg])

        return CompilationResult(success=True, output_file=output_file, ir=ir)

    def get_ir(self, file: File) -> str:
        """Generate IR from AST"""
        logger.debug("generating IR for package %s", file.package)
        generator = IRGenerator(main_package=self.main_package, prefix=self.prefix)
        return generator.generate(file)

    def build(self, ir: str, output_file: str) -> None:
        """Build an executable from IR text using clang"""
        if shutil.which(self.clang) is None:
            raise RuntimeError(f"{self.clang} not found")
        with tempfile.TemporaryDirectory(prefix="ugoc_") as td:
            ll_path = os.path.join(td, "main.ll")
            with open(ll_path, "w", encoding="utf-8") as f:
                f.write(ir)
            inputs = [ll_path]
            if self.with_runtime:
                rt_path = os.path.join(td, "runtime.ll")
                with open(rt_path, "w", encoding="utf-8") as f:
                    f.write(builtin.RUNTIME)
                inputs.append(rt_path)
            self._run([self.clang, "-Wno-override-module", "-o", output_file, *inputs])

    def _run(self, cmd: List[str]) -> None:
        logger.debug("running %s", " ".join(cmd))
        p = subprocess.run(cmd, check=False, stdout=subprocess.PIPE, stderr=subprocess.PIPE, text=True)
        if p.returncode != 0:
            msg = p.stderr.strip() or p.stdout.strip() or "(no output)"
            raise subprocess.CalledProcessError(p.returncode, cmd, output=p.stdout, stderr=msg)

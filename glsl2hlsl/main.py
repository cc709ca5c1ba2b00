"""Command line interface for glsl2hlsl.

This module provides a command-line interface for converting GLSL fragment shaders
to HLSL and for checking shader packages against the shader contract.
"""

import os
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any, Optional, TypeVar, cast

import typer
import watchdog.events
import watchdog.observers
from loguru import logger
from watchdog.events import FileSystemEventHandler

import glsl2hlsl
from glsl2hlsl.contract import check_glsl_contract, check_hlsl_output
from glsl2hlsl.converter import InputContract, convert_glsl_to_hlsl, detect_contract
from glsl2hlsl.converter.formatter import add_header_comments
from glsl2hlsl.errors import ManifestError
from glsl2hlsl.manifest import discover_shaders, load_manifest, read_entry_source
from glsl2hlsl.models import UniformSpec
from glsl2hlsl.spirv import DEFAULT_COMPILER, compile_to_spirv, find_compiler

# Define type variables for TypedCallable
F = TypeVar("F", bound=Callable[..., Any])


# TypedCommand decorator helper
def typed_command(app_command: Any) -> Callable[[F], F]:
    """Wrap typer command with proper typing for mypy."""

    def decorator(func: F) -> F:
        return cast(F, app_command(func))

    return decorator


app = typer.Typer(
    name="glsl2hlsl",
    help=(
        "Convert GLSL fragment shaders into HLSL (Shader Model 5). "
        "Commands: convert, check, watch."
    ),
    add_completion=False,
)


def _map_contract(contract: str) -> InputContract | None:
    """Map a contract string to an input contract.

    Args:
        contract: Contract string ("auto", "declaration", "main-image")

    Returns:
        The input contract, or None to detect it from the source
    """
    contract = contract.lower()
    if contract == "auto":
        return None
    elif contract == "declaration":
        return InputContract.DECLARATION
    elif contract in ("main-image", "shadertoy"):
        return InputContract.MAIN_IMAGE
    else:
        logger.warning(f"Unknown contract: {contract}. Detecting from source.")
        return None


def _load_uniforms(manifest: Path | None) -> list[UniformSpec]:
    """Load the custom uniforms a manifest declares.

    Args:
        manifest: Manifest file, if any

    Returns:
        Custom uniforms in declaration order
    """
    if manifest is None:
        return []
    try:
        return load_manifest(manifest).uniforms
    except ManifestError as e:
        logger.error(f"Invalid manifest: {e}")
        raise typer.Exit(1) from e


def _convert_file(
    source_file: Path,
    manifest: Path | None,
    contract: str,
    header: bool,
) -> str:
    """Convert a GLSL file to HLSL.

    Args:
        source_file: GLSL source file
        manifest: Manifest declaring custom uniforms, if any
        contract: Contract string from the command line
        header: Prepend generated-by comments

    Returns:
        HLSL source
    """
    try:
        source = source_file.read_text(encoding="utf-8")
    except OSError as e:
        logger.error(f"Failed to read shader source: {e}")
        raise typer.Exit(1) from e

    uniforms = _load_uniforms(manifest)
    input_contract = _map_contract(contract) or detect_contract(source)
    logger.info(f"Converting {source_file.name} with the {input_contract.name} contract")

    hlsl = convert_glsl_to_hlsl(source, uniforms, input_contract)
    if header:
        hlsl = add_header_comments(
            hlsl, glsl2hlsl.__version__, source_file.name, input_contract.name
        )
    return hlsl


# Define reusable arguments
SOURCE_ARG = typer.Argument(..., help="GLSL shader source file")
OUTPUT_ARG = typer.Argument(None, help="Output HLSL file (stdout when omitted)")
MANIFEST_OPTION = typer.Option(
    None, "--manifest", "-m", help="Shader manifest declaring custom uniforms"
)
CONTRACT_OPTION = typer.Option(
    "auto", "--contract", "-c", help="Input contract (auto, declaration, main-image)"
)


@typed_command(app.command("convert"))
def convert_shader(
    source_file: Path = SOURCE_ARG,
    output: Optional[Path] = OUTPUT_ARG,
    manifest: Optional[Path] = MANIFEST_OPTION,
    contract: str = CONTRACT_OPTION,
    header: bool = typer.Option(
        False, "--header", help="Prepend generated-by comments"
    ),
) -> None:
    """Convert a GLSL shader to HLSL.

    Writes to OUTPUT, or to stdout when no output file is given.

    Example: glsl2hlsl convert shaders/rain/shader.glsl rain.hlsl -m shaders/rain/package.json
    """
    hlsl = _convert_file(source_file, manifest, contract, header)

    if output is None:
        typer.echo(hlsl, nl=False)
        return

    logger.info(f"Writing HLSL to {output}...")
    output.write_text(hlsl, encoding="utf-8")
    logger.info(f"HLSL written to {output}")


def _check_shader(manifest_path: Path, spirv: bool, compiler: str) -> list[str]:
    """Run every check on one shader package.

    Args:
        manifest_path: Manifest of the shader
        spirv: Also compile the GLSL to SPIR-V
        compiler: SPIR-V compiler executable

    Returns:
        Problems found, empty when the shader passes
    """
    try:
        manifest = load_manifest(manifest_path)
        source = read_entry_source(manifest)
    except (ManifestError, OSError) as e:
        return [f"manifest: {e}"]

    problems = [f"GLSL: {v}" for v in check_glsl_contract(source)]

    hlsl = convert_glsl_to_hlsl(source, manifest.uniforms)
    problems.extend(
        f"HLSL: {v}"
        for v in check_hlsl_output(hlsl, manifest.uniforms, manifest.uses_texture)
    )

    if spirv:
        result = compile_to_spirv(source, manifest.uniforms, compiler)
        if not result.ok:
            problems.append(f"SPIR-V: {result.error}")

    return problems


@typed_command(app.command("check"))
def check_shaders(
    root: Path = typer.Argument(..., help="Directory with one subdirectory per shader"),
    spirv: bool = typer.Option(
        False, "--spirv", help="Also compile each shader to SPIR-V"
    ),
    compiler: str = typer.Option(
        DEFAULT_COMPILER, "--compiler", help="SPIR-V compiler executable"
    ),
) -> None:
    """Check shader packages against the shader contract.

    Validates each manifest, the GLSL input contract and the converted HLSL.

    Example: glsl2hlsl check shaders/ --spirv
    """
    if not root.is_dir():
        logger.error(f"Not a directory: {root}")
        raise typer.Exit(1)

    manifests = discover_shaders(root)
    if not manifests:
        logger.error(f"No shaders found in {root}")
        raise typer.Exit(1)

    if spirv and find_compiler(compiler) is None:
        logger.warning(f"{compiler} not found on PATH, skipping SPIR-V compilation")
        spirv = False

    failed = 0
    for manifest_path in manifests:
        shader = manifest_path.parent.name
        problems = _check_shader(manifest_path, spirv, compiler)
        if problems:
            failed += 1
            for problem in problems:
                logger.error(f"{shader}: {problem}")
        else:
            logger.info(f"✓ {shader}")

    logger.info(f"Checked {len(manifests)} shaders, {failed} failed")
    if failed:
        raise typer.Exit(1)


class ShaderChangeHandler(FileSystemEventHandler):  # type: ignore
    """Event handler for shader file changes."""

    def __init__(
        self,
        source_file: Path,
        output: Path,
        manifest: Path | None,
        contract: str,
        header: bool,
    ):
        """Initialize shader change handler.

        Args:
            source_file: GLSL source file
            output: Output HLSL file
            manifest: Manifest declaring custom uniforms, if any
            contract: Contract string from the command line
            header: Prepend generated-by comments
        """
        self.source_file = source_file
        self.output = output
        self.manifest = manifest
        self.contract = contract
        self.header = header
        self.watched = {os.path.abspath(source_file)}
        if manifest is not None:
            self.watched.add(os.path.abspath(manifest))

    def on_modified(self, event: watchdog.events.FileSystemEvent) -> None:
        """Handle file modified event.

        Args:
            event: File system event
        """
        if os.path.abspath(event.src_path) in self.watched:
            logger.info(f"Detected changes in {event.src_path}")
            self.convert()

    def convert(self) -> bool:
        """Convert the shader and write the output file.

        Returns:
            Whether the conversion succeeded
        """
        try:
            hlsl = _convert_file(
                self.source_file, self.manifest, self.contract, self.header
            )
            self.output.write_text(hlsl, encoding="utf-8")
        except typer.Exit:
            return False
        except OSError as e:
            logger.error(f"Error writing {self.output}: {e}")
            return False

        logger.info(f"HLSL written to {self.output}")
        return True


@typed_command(app.command("watch"))
def watch_shader(
    source_file: Path = SOURCE_ARG,
    output: Path = typer.Argument(..., help="Output HLSL file"),
    manifest: Optional[Path] = MANIFEST_OPTION,
    contract: str = CONTRACT_OPTION,
    header: bool = typer.Option(
        False, "--header", help="Prepend generated-by comments"
    ),
) -> None:
    """Watch a shader and convert it again on every change.

    Example: glsl2hlsl watch shaders/rain/shader.glsl rain.hlsl
    """
    handler = ShaderChangeHandler(source_file, output, manifest, contract, header)
    handler.convert()

    # Create file system observer for auto-reload
    observer = watchdog.observers.Observer()
    directories = {os.path.dirname(path) for path in handler.watched}
    for directory in directories:
        observer.schedule(handler, path=directory, recursive=False)
    observer.start()

    logger.info(f"Watching {source_file} (press Ctrl+C to exit)...")
    try:
        while observer.is_alive():
            time.sleep(0.5)
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received, stopping...")
    finally:
        observer.stop()
        observer.join()


if __name__ == "__main__":
    app()

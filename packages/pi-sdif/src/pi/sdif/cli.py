"""CLI entry point for pi-sdif. Uses Click for argument parsing."""

from __future__ import annotations

import logging
import sys
from contextlib import ExitStack

import click
from click.core import ParameterSource

from pi.sdif.backend import DiffProcess
from pi.sdif.config import MARK_PRESETS, Config, load_config, merge_overrides
from pi.sdif.errors import SdifError
from pi.sdif.render import EXIT_TROUBLE, SideBySide
from pi.sdif.source import IterLineSource

logger = logging.getLogger(__name__)

# Backend flags passed through to the diff command.
_DIFF_FLAGS = {
    "context": "-c",
    "unified": "-u",
    "ignore_space_change": "-b",
    "ignore_all_space": "-w",
    "ignore_blank_lines": "-B",
    "ignore_case": "-i",
}

_CONFIG_OPTIONS = (
    "width",
    "number",
    "digit",
    "truncate",
    "onword",
    "mark",
    "color",
    "color256",
    "view",
    "tabstop",
    "hunks_only",
    "diff",
)


def _parse_colormap(values: tuple[str, ...]) -> list[tuple[str, str]]:
    pairs: list[tuple[str, str]] = []
    for value in values:
        pattern, sep, spec = value.partition("=")
        if not sep or not pattern:
            raise click.BadParameter(f"expected PATTERN=SPEC, got {value!r}", param_hint="--cm")
        pairs.append((pattern, spec))
    return pairs


def _open(path: str):
    return open(path, encoding="utf-8", errors="replace")


def _run(renderer: SideBySide, config: Config, files: tuple[str, ...]) -> int:
    with ExitStack() as stack:
        if len(files) == 2:
            old_path, new_path = files
            old_file = stack.enter_context(_open(old_path))
            new_file = stack.enter_context(_open(new_path))
            proc = stack.enter_context(
                DiffProcess(old_path, new_path, command=config.diff, options=config.diff_options)
            )
            return renderer.run(proc, old_file, new_file)
        if files and files[0] != "-":
            return renderer.run(IterLineSource(stack.enter_context(_open(files[0]))))
        return renderer.run(IterLineSource(sys.stdin))


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("files", nargs=-1, type=click.Path(dir_okay=False, allow_dash=True))
@click.option("-W", "--width", type=int, default=None, help="Total output width (default: terminal width)")
@click.option("-n", "--number/--no-number", default=False, help="Show line numbers")
@click.option("--digit", type=int, default=4, show_default=True, help="Line number digits")
@click.option("--truncate/--fold", default=False, help="Truncate long lines instead of folding")
@click.option("--onword/--no-onword", default=False, help="Fold long lines at word boundaries")
@click.option("--mark", type=click.Choice(list(MARK_PRESETS)), default="center", show_default=True, help="Mark position")
@click.option("--color/--no-color", default=True, help="Colorize output")
@click.option("--256/--no-256", "color256", default=True, help="Use the 256-color palette")
@click.option("--cm", "colormap", multiple=True, metavar="PATTERN=SPEC", help="Override a field color, e.g. '*TEXT=K/454'")
@click.option("-V", "--view/--no-view", default=False, help="Show old and new text without change marks")
@click.option("--tabstop", type=int, default=8, show_default=True, help="Tab width")
@click.option("--hunks-only", is_flag=True, default=False, help="With two files, show only the changed hunks")
@click.option("--diff", default="diff", show_default=True, help="Diff command used for two files")
@click.option("-c", "context", is_flag=True, help="Use context diff output")
@click.option("-u", "unified", is_flag=True, help="Use unified diff output")
@click.option("-b", "ignore_space_change", is_flag=True, help="Ignore changes in amount of white space")
@click.option("-w", "ignore_all_space", is_flag=True, help="Ignore all white space")
@click.option("-B", "ignore_blank_lines", is_flag=True, help="Ignore blank line changes")
@click.option("-i", "ignore_case", is_flag=True, help="Ignore case differences")
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"]),
    default="warning",
    show_default=True,
)
@click.pass_context
def main(ctx: click.Context, files: tuple[str, ...], colormap: tuple[str, ...], log_level: str, **options) -> None:
    """Show diff output side by side.

    With FILE1 FILE2, run the diff command on them and show both files.
    With one FILE, read diff output from it; with none, from stdin.
    """
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )
    if len(files) > 2:
        raise click.UsageError("expected at most two files")
    if len(files) == 2 and "-" in files:
        raise click.UsageError("standard input can only be used for diff output")

    overrides = {
        name: options[name]
        for name in _CONFIG_OPTIONS
        if ctx.get_parameter_source(name) is not ParameterSource.DEFAULT
    }
    overrides["colormap"] = _parse_colormap(colormap)
    overrides["diff_options"] = [flag for name, flag in _DIFF_FLAGS.items() if options[name]]
    config = merge_overrides(load_config(), **overrides)
    logger.debug("effective config: %s", config)

    try:
        renderer = SideBySide(config, sys.stdout)
        status = _run(renderer, config, files)
        sys.stdout.flush()
    except (SdifError, ValueError) as e:
        click.echo(f"pi-sdif: {e}", err=True)
        sys.exit(EXIT_TROUBLE)
    except BrokenPipeError:
        click.echo("pi-sdif: broken pipe on standard output", err=True)
        sys.exit(EXIT_TROUBLE)
    except OSError as e:
        where = e.filename or "standard output"
        click.echo(f"pi-sdif: {where}: {e.strerror or e}", err=True)
        sys.exit(EXIT_TROUBLE)
    sys.exit(status)


if __name__ == "__main__":
    main()

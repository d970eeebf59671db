"""Command-line interface for bookmerge.

Responsibilities:
- Expose user-facing commands for merging and title previews.
- Convert CLI arguments and YAML defaults into `BookmergeConfig`.

Key public functions:
- `app`: Typer application instance.
- `main`: invoke the Typer application.
"""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Annotated

import typer
import yaml

from .cli_rendering import echo_merge_summary, echo_title_preview, exit_with_command_error
from .config import BookmergeConfig, ConfigLoader
from .errors import PipelineStageError
from .pipeline import AudiobookPipeline
from .telemetry.logger import RunLogger

app = typer.Typer(
    name="bookmerge",
    no_args_is_help=True,
    help="Merge chapter audio files into one chaptered audiobook.",
)


class MergeProgressIndicator:
    """Print one `[progress]` line per merge stage, e.g. `| 1/5 stage=discover`.

    Instances are passed directly as the pipeline's stage progress callback.
    """

    _SPINNER_FRAMES = "|/-\\"

    def __init__(self, command_name: str) -> None:
        self._command_name = command_name

    def __call__(self, stage_name: str, stage_index: int, stage_total: int) -> None:
        frame = self._SPINNER_FRAMES[(stage_index - 1) % len(self._SPINNER_FRAMES)]
        typer.echo(
            f"[progress] command={self._command_name} "
            f"{frame} {stage_index}/{stage_total} stage={stage_name}"
        )


def _load_yaml_config(config_path: Path | None) -> BookmergeConfig | None:
    """Load `--config` when given; every failure becomes a `config` stage error."""

    if config_path is None:
        return None

    try:
        return ConfigLoader.from_yaml(config_path)
    except FileNotFoundError as exc:
        raise PipelineStageError(
            stage="config",
            detail=f"Config file not found: `{config_path}`.",
            hint="Provide an existing path via `--config <path.yaml>`.",
        ) from exc
    except yaml.YAMLError as exc:
        raise PipelineStageError(
            stage="config",
            detail=f"Config file `{config_path}` is not valid YAML: {exc}",
            hint="Check indentation and quoting, then rerun.",
        ) from exc
    except ValueError as exc:
        raise PipelineStageError(
            stage="config",
            detail=f"Invalid config file `{config_path}`: {exc}",
            hint="Fix config keys/values and rerun.",
        ) from exc
    except OSError as exc:
        raise PipelineStageError(
            stage="config",
            detail=f"Failed to read config file `{config_path}`: {exc}",
            hint="Verify the path is a readable file.",
        ) from exc


def _resolve_command_config(
    config_file: Path | None,
    input_dir: Path | None,
    out: Path | None = None,
    threshold: float | None = None,
    album_title: str | None = None,
    codec: str | None = None,
    reencode: bool | None = None,
) -> BookmergeConfig:
    """Resolve effective command config from YAML defaults and explicit CLI overrides."""

    loaded_config = _load_yaml_config(config_file)
    if loaded_config is None:
        if input_dir is None:
            raise PipelineStageError(
                stage="config",
                detail="Input directory is required when `--config` is not provided.",
                hint="Pass `<input_dir>` or use `--config <path.yaml>` with `input_dir`.",
            )
        loaded_config = BookmergeConfig(input_dir=input_dir)

    overrides: dict[str, object] = {}
    if input_dir is not None:
        overrides["input_dir"] = input_dir
    if out is not None:
        overrides["output_path"] = out
    if threshold is not None:
        overrides["title_threshold"] = threshold
    if album_title is not None:
        overrides["album_title"] = album_title
    if codec is not None:
        overrides["audio_codec"] = codec
    if reencode is not None:
        overrides["reencode"] = reencode
    return replace(loaded_config, **overrides)


_ThresholdOption = Annotated[
    float | None,
    typer.Option(
        "--threshold",
        help="Batch share (0-1] at which a leading title word is stripped. Default 0.8.",
    ),
]
_ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", help="Path to YAML config file with command defaults."),
]


@app.command("build")
def build_command(
    input_dir: Annotated[
        Path | None,
        typer.Argument(help="Directory of chapter audio files. Required unless in `--config`."),
    ] = None,
    out: Annotated[
        Path | None,
        typer.Option("--out", help="Merged audiobook path (default `<input_dir>/output.m4b`)."),
    ] = None,
    config_file: _ConfigOption = None,
    threshold: _ThresholdOption = None,
    album_title: Annotated[
        str | None,
        typer.Option("--album-title", help="Container title metadata."),
    ] = None,
    codec: Annotated[
        str | None,
        typer.Option("--codec", help="ffmpeg audio encoder used for re-encoding."),
    ] = None,
    reencode: Annotated[
        bool | None,
        typer.Option(
            "--reencode/--no-reencode",
            help="Re-encode every source before concatenation.",
        ),
    ] = None,
) -> None:
    """Merge chapter files into one audiobook with cleaned chapter titles."""

    try:
        config = _resolve_command_config(
            config_file=config_file,
            input_dir=input_dir,
            out=out,
            threshold=threshold,
            album_title=album_title,
            codec=codec,
            reencode=reencode,
        )
        pipeline = AudiobookPipeline(
            run_logger=RunLogger(),
            stage_progress_callback=MergeProgressIndicator(command_name="build"),
        )
        result = pipeline.run(config)
    except Exception as exc:
        exit_with_command_error("build", exc)

    echo_merge_summary(result)


@app.command("chapters")
def chapters_command(
    input_dir: Annotated[
        Path | None,
        typer.Argument(help="Directory of chapter audio files. Required unless in `--config`."),
    ] = None,
    config_file: _ConfigOption = None,
    threshold: _ThresholdOption = None,
) -> None:
    """Preview cleaned chapter titles without running ffmpeg."""

    try:
        config = _resolve_command_config(
            config_file=config_file,
            input_dir=input_dir,
            threshold=threshold,
        )
        titles = AudiobookPipeline().preview_titles(config)
    except Exception as exc:
        exit_with_command_error("chapters", exc)

    echo_title_preview(titles)


def main() -> None:
    """CLI entrypoint for console scripts."""
    app()


if __name__ == "__main__":
    main()

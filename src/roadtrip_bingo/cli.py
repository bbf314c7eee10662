from __future__ import annotations

import json
import logging
import sys
import time
from pathlib import Path
from typing import Any, Dict, Optional

import typer

from .config import options_from_resolved, resolve_parameters
from .core import generate_bingo_cards
from .difficulty import expected_multi_hit_count, parse_difficulty
from .errors import BingoGenerationError
from .feasibility import center_blank_applies, required_icon_count, validate_grid_size
from .logging_setup import setup_logging
from .serialize import (
    build_run_meta,
    check_outputs_writable,
    emit_cards_json,
    emit_report_json,
    emit_summary_csv,
    icons_in_result,
    load_icon_pool,
    options_from_dict,
    result_from_dict,
)
from .uniqueness import card_fingerprint
from .verify import verify as verify_result
from .version import __version__

app = typer.Typer(help="Road-trip bingo card generator CLI")
logger = logging.getLogger(__name__)


def _version_callback(value: bool) -> None:
    # Runs during option parsing, so it works without a subcommand.
    if value:
        typer.echo(__version__)
        raise typer.Exit(0)


@app.callback()
def common_options(
    version: bool = typer.Option(
        False,
        "--version",
        help="Show application version and exit",
        is_eager=True,
        callback=_version_callback,
    ),
) -> None:
    pass


@app.command()
def generate(
    config: Optional[str] = typer.Option(None, "--config", help="Path to config file (YAML/JSON)"),
    icons: Optional[str] = typer.Option(
        None, "--icons", help="Icon pool: JSON/YAML file or a directory of images"
    ),
    grid_size: Optional[int] = typer.Option(None, "--grid-size", help="Grid size N (3-8)"),
    sets: Optional[int] = typer.Option(None, "--sets", help="Number of card sets"),
    cards_per_set: Optional[int] = typer.Option(None, "--cards-per-set", help="Cards in each set"),
    title: Optional[str] = typer.Option(None, "--title", help="Title printed on every card"),
    center_blank: Optional[bool] = typer.Option(
        None, "--center-blank/--no-center-blank", help="Free center cell (odd grids >= 5)"
    ),
    same_card: Optional[bool] = typer.Option(
        None, "--same-card/--no-same-card", help="Repeat one card across each set"
    ),
    multi_hit: Optional[bool] = typer.Option(
        None, "--multi-hit/--no-multi-hit", help="Mark some cells as needing several sightings"
    ),
    difficulty: Optional[str] = typer.Option(None, "--difficulty", help="LIGHT|MEDIUM|HARD"),
    avoid_clustering: Optional[bool] = typer.Option(
        None,
        "--avoid-clustering/--allow-clustering",
        help="Spread multi-hit cells apart on larger grids",
    ),
    seed: Optional[int] = typer.Option(None, "--seed", help="Seed for reproducible cards"),
    rng_engine: Optional[str] = typer.Option(None, "--rng-engine", help="py_random|numpy_pcg64"),
    out_cards: Optional[str] = typer.Option(None, "--out-cards", help="cards.json output path"),
    out_report: Optional[str] = typer.Option(None, "--out-report", help="report.json output path"),
    summary_csv: Optional[str] = typer.Option(None, "--summary-csv", help="Icon usage CSV (optional)"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Log file path"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="DEBUG|INFO|WARN|ERROR"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Resolve params and exit"),
    force: bool = typer.Option(False, "--force", help="Overwrite outputs if they exist"),
    no_mkdirs: bool = typer.Option(False, "--no-mkdirs", help="Do not create parent directories"),
) -> None:
    """Generate card sets from an icon pool and write cards/report JSON."""

    flags: Dict[str, Any] = {
        "icons": icons,
        "grid_size": grid_size,
        "set_count": sets,
        "cards_per_set": cards_per_set,
        "title": title,
        "leave_center_blank": center_blank,
        "same_card_per_set": same_card,
        "multi_hit_mode": multi_hit,
        "difficulty": difficulty,
        "avoid_multi_hit_clustering": avoid_clustering,
        "seed.value": seed,
        "seed.engine": rng_engine,
        "out_cards": out_cards,
        "out_report": out_report,
        "summary_csv": summary_csv,
        "log_file": log_file,
        "log_level": log_level,
    }
    cli_overrides = {k: v for k, v in flags.items() if v is not None}

    try:
        resolved, params_hash, _cfg_path_unused = resolve_parameters(
            config_path_str=config, cli_overrides=cli_overrides
        )
    except (FileNotFoundError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=2)

    setup_logging(
        level=str(resolved.get("log_level", "INFO")),
        log_file=resolved.get("log_file"),
        json_format=(str(resolved.get("log_format", "text")) == "json"),
    )

    if dry_run:
        typer.echo(f"Params hash: {params_hash}")
        typer.echo(json.dumps(resolved, sort_keys=True, indent=2, default=str))
        raise typer.Exit(0)

    icons_path = resolved.get("icons")
    if not icons_path:
        typer.echo("Error: no icon pool given (use --icons or set 'icons' in the config)", err=True)
        raise typer.Exit(code=2)

    try:
        pool = load_icon_pool(Path(icons_path))
    except (FileNotFoundError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=2)
    logger.info("Loaded %d icons from %s", len(pool), icons_path)

    start_time = time.time()
    try:
        options = options_from_resolved(resolved, pool)
        result = generate_bingo_cards(options)
    except BingoGenerationError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=2)
    elapsed = time.time() - start_time

    cards = result.all_cards()
    typer.echo(f"Generated {len(result.card_sets)} set(s), {len(cards)} card(s) in {elapsed:.3f}s")
    for card_set in result.card_sets:
        typer.echo(f"  {card_set.identifier}: {len(card_set.cards)} card(s)")

    report = verify_result(result, options)
    if not report["ok"]:
        logger.warning("Verification reported failed checks; see report for details")
    if report["duplicate_identifiers"]:
        logger.warning("%d set identifier(s) repeat within this batch", report["duplicate_identifiers"])

    run_meta = build_run_meta(
        app_version=__version__,
        params_hash=params_hash,
        seed=options.seed,
        rng_engine=options.rng_engine,
    )

    out_cards_path = Path(resolved.get("out_cards") or "cards.json")
    out_report_path = Path(resolved.get("out_report") or "report.json")
    summary_path = Path(resolved["summary_csv"]) if resolved.get("summary_csv") else None
    targets = [out_cards_path, out_report_path] + ([summary_path] if summary_path else [])

    try:
        check_outputs_writable(targets, overwrite=force)
        emit_cards_json(
            out_cards_path,
            result=result,
            options=options,
            run_meta=run_meta,
            mkdirs=(not no_mkdirs),
            overwrite=force,
        )
        emit_report_json(
            out_report_path,
            report=report,
            mkdirs=(not no_mkdirs),
            overwrite=force,
        )
        if summary_path is not None:
            freqs = report.get("frequencies", {})
            if not isinstance(freqs, dict):
                freqs = {}
            emit_summary_csv(
                summary_path,
                freqs=freqs,
                mkdirs=(not no_mkdirs),
                overwrite=force,
            )
    except FileExistsError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    typer.echo(f"Output files: {out_cards_path}, {out_report_path}")
    raise typer.Exit(code=0)


@app.command()
def preview(
    grid_size: int = typer.Option(5, "--grid-size", help="Grid size N (3-8)"),
    center_blank: bool = typer.Option(False, "--center-blank/--no-center-blank"),
    difficulty: str = typer.Option("MEDIUM", "--difficulty", help="LIGHT|MEDIUM|HARD"),
) -> None:
    """Show how many icons a card needs and how many multi-hit cells to expect."""
    try:
        validate_grid_size(grid_size)
        level = parse_difficulty(difficulty)
    except BingoGenerationError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=2)
    applied = center_blank and center_blank_applies(grid_size)
    typer.echo(f"Icons needed per card: {required_icon_count(grid_size, center_blank)}")
    typer.echo(f"Free center: {'yes' if applied else 'no'}")
    typer.echo(
        f"Expected multi-hit cells ({level.value}): "
        f"{expected_multi_hit_count(grid_size, applied, level)}"
    )


@app.command()
def verify(
    cards: str = typer.Option(..., "--cards", help="Path to cards.json"),
    strict: bool = typer.Option(False, "--strict", help="Exit non-zero on any failed check"),
) -> None:
    """Re-check a cards.json produced by ``generate``."""
    path = Path(cards)
    if not path.exists():
        typer.echo(f"Error: file not found: {path}", err=True)
        raise typer.Exit(code=2)
    data = json.loads(path.read_text(encoding="utf-8"))
    result = result_from_dict(data)

    tampered = 0
    for stored_set, card_set in zip(data.get("card_sets", []), result.card_sets):
        for stored, card in zip(stored_set.get("cards", []), card_set.cards):
            if stored.get("fingerprint") != card_fingerprint(card):
                tampered += 1

    options = options_from_dict(data.get("options", {}), icons_in_result(result)) if "options" in data else None
    failed = []
    if tampered:
        failed.append(f"fingerprint mismatch on {tampered} card(s)")
    if options is None:
        failed.append("cards file carries no options block")
    else:
        report = verify_result(result, options)
        failed.extend(
            key for key, value in sorted(report.items()) if key.startswith("ok_") and value is False
        )

    if failed:
        for item in failed:
            typer.echo(f"FAIL: {item}")
        raise typer.Exit(code=1 if strict else 0)
    typer.echo(f"OK: {len(result.all_cards())} card(s) in {len(result.card_sets)} set(s)")


def main(_argv: list[str] | None = None) -> int:
    try:
        app(standalone_mode=True)
        return 0
    except SystemExit as e:
        return int(e.code) if e.code is not None else 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())

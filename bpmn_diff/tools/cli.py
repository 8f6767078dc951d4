"""
BPMN Diff CLI Interface

Command-line tool for comparing two BPMN files, with text or JSON output
and an optional AI-generated summary.
"""

import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

import click

from bpmn_diff.agent import BPMNComparer, ComparisonConfig, ComparisonReport
from bpmn_diff.core.errors import ComparisonError
from bpmn_diff.core.observability import LogLevel, ObservabilityConfig, ObservabilityManager
from bpmn_diff.models.diff import DiffResult
from bpmn_diff.models.elements import ElementSet
from bpmn_diff.stages.extraction import DuplicateIdPolicy


@click.group()
def cli():
    """BPMN Diff CLI - Compare two versions of a BPMN process."""
    pass


@cli.command()
@click.argument("original", type=click.Path(exists=True, dir_okay=False))
@click.argument("modified", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format",
)
@click.option(
    "--summary/--no-summary",
    default=False,
    help="Ask the configured LLM for a plain-language summary",
)
@click.option(
    "--literal-prefixes",
    is_flag=True,
    help="Match namespaced attributes by literal prefix instead of namespace URI",
)
@click.option(
    "--duplicate-ids",
    type=click.Choice([policy.value for policy in DuplicateIdPolicy]),
    default=None,
    help="Handling of ids declared twice in one document [default: BPMN_DIFF_DUPLICATE_IDS or overwrite]",
)
@click.option(
    "--verbose/--quiet",
    default=False,
    help="Verbose logging output (stderr)",
)
def compare(
    original: str,
    modified: str,
    output_format: str,
    summary: bool,
    literal_prefixes: bool,
    duplicate_ids: Optional[str],
    verbose: bool,
) -> None:
    """
    Compare ORIGINAL and MODIFIED BPMN files.

    \b
    Examples:
        bpmn-diff compare v1.bpmn v2.bpmn
        bpmn-diff compare v1.bpmn v2.bpmn --format json
        bpmn-diff compare v1.bpmn v2.bpmn --summary
    """
    if verbose:
        ObservabilityManager.initialize(
            ObservabilityConfig(service_name="bpmn-diff-cli", log_level=LogLevel.DEBUG)
        )

    config = ComparisonConfig.from_env()
    config.resolve_namespaces = not literal_prefixes
    if duplicate_ids is not None:
        config.duplicate_id_policy = DuplicateIdPolicy(duplicate_ids)
    config.enable_summary = summary
    comparer = BPMNComparer(config)

    original_xml = Path(original).read_bytes()
    modified_xml = Path(modified).read_bytes()

    try:
        if summary:
            report = asyncio.run(comparer.compare_with_summary(original_xml, modified_xml))
        else:
            report = ComparisonReport(diff=comparer.compare_xml(original_xml, modified_xml))
    except ComparisonError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if output_format == "json":
        _output_json(report)
    else:
        _output_text(report, original, modified)


@cli.command()
@click.argument("bpmn_file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format",
)
def extract(bpmn_file: str, output_format: str) -> None:
    """
    List the process elements recognized in a BPMN file.

    \b
    Examples:
        bpmn-diff extract diagram.bpmn
        bpmn-diff extract diagram.bpmn --format json
    """
    comparer = BPMNComparer(ComparisonConfig(enable_summary=False))
    try:
        element_set = comparer.extract(Path(bpmn_file).read_bytes())
    except ComparisonError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if output_format == "json":
        payload = [element.model_dump(mode="json") for element in element_set.values()]
        click.echo(json.dumps(payload, indent=2))
    else:
        _output_elements(element_set)


@cli.command()
def info() -> None:
    """Show version and configuration information."""
    from bpmn_diff import __version__

    info_dict = {
        "name": "BPMN Diff",
        "version": __version__,
        "description": "Semantic comparison of two BPMN 2.0 process definitions",
        "duplicate_id_policies": [policy.value for policy in DuplicateIdPolicy],
        "llm_providers": ["gemini", "openai_compatible", "ollama"],
    }

    click.echo(json.dumps(info_dict, indent=2))


# ==================
# Helper Functions
# ==================


def _output_elements(element_set: ElementSet) -> None:
    """Output one line per element."""
    for element in element_set.values():
        line = f"{element.id}  {element.type}"
        if element.name:
            line += f'  "{element.name}"'
        if element.is_flow:
            line += f"  {element.source_ref} -> {element.target_ref}"
        click.echo(line)
    click.echo(f"\n{len(element_set)} elements", err=True)


def _format_value(value: Optional[str]) -> str:
    return "(absent)" if value is None else f'"{value}"'


def _output_text(report: ComparisonReport, original: str, modified: str) -> None:
    """Output results as plain text."""
    diff: DiffResult = report.diff
    click.echo(f"--- {original}")
    click.echo(f"+++ {modified}")

    if diff.is_empty:
        click.echo("No differences.")

    for element in diff.added_details:
        click.echo(f"+ {element.type} {element.id} \"{element.name}\"")

    for element in diff.removed_details:
        click.echo(f"- {element.type} {element.id} \"{element.name}\"")

    for detail in diff.modified:
        click.echo(f"~ {detail.type} {detail.id} \"{detail.name}\"")
        for change in detail.changes:
            click.echo(
                f"    {change.property}: {_format_value(change.old_value)}"
                f" -> {_format_value(change.new_value)}"
            )

    counts = diff.counts()
    click.echo(
        f"\n{counts['added']} added, {counts['removed']} removed, {counts['modified']} modified"
    )

    if report.summary:
        click.echo("\n--- Summary ---")
        click.echo(report.summary)
    elif report.summary_error:
        click.echo(f"Summary unavailable: {report.summary_error}", err=True)


def _output_json(report: ComparisonReport) -> None:
    """Output results as JSON."""
    click.echo(json.dumps(report.model_dump(mode="json", by_alias=True), indent=2))


if __name__ == "__main__":
    cli()

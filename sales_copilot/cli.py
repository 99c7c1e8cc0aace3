import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table
from rich.progress import track

from .extended_profile import ExtendedProfileClassifier
from .importers.plaintext import PlaintextImporter
from .insights import BehavioralAnalyzer
from .personality import PersonalityClassifier
from .recommendations import recommend
from .rules import PROFILE_DISPLAY_NAMES
from .schemas import (
    ClassificationInput, ConversationAnalysis, Profile, Recommendation,
    RecommendationContext, SalesStage, normalize_profile
)
from .scoring import OutputGenerator, ProfileScorer
from .settings import Settings, build_llm_client

app = typer.Typer(help="Sales Copilot - behavioral profiling and coaching for sales conversations")
console = Console()


@app.callback()
def main(
    log_level: str = typer.Option("WARNING", "--log-level", help="Logging level for library output")
):
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.WARNING),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def _load_input(text: Optional[str], file: Optional[Path]) -> ClassificationInput:
    if file is not None:
        if not file.exists():
            console.print(f"[red]Error: File {file} does not exist[/red]")
            raise typer.Exit(1)
        conversation = PlaintextImporter().parse_file(file)
        if not conversation.utterances:
            console.print(f"[red]Error: No dialogue lines found in {file}[/red]")
            raise typer.Exit(1)
        return conversation.to_classification_input()

    if not text or not text.strip():
        console.print("[red]Error: Provide a transcript or --file[/red]")
        raise typer.Exit(1)
    return ClassificationInput(transcript=text)


def _print_recommendation(rec: Recommendation):
    console.print(f"\n[bold]Ação imediata:[/bold] {rec.immediate_action}")
    console.print(f"[bold]Abordagem:[/bold] {rec.approach}")
    console.print(f"[bold]Script:[/bold] [italic]{rec.suggested_script}[/italic]")
    console.print(f"[bold]Timing / prioridade:[/bold] {rec.timing.value} / {rec.priority.value}")
    if rec.objection_handling:
        console.print(f"[bold]Objeções:[/bold] {rec.objection_handling}")
    for i, step in enumerate(rec.next_steps, 1):
        console.print(f"  {i}. {step}")


@app.command()
def analyze(
    text: Optional[str] = typer.Argument(None, help="Transcript text to classify"),
    file: Optional[Path] = typer.Option(None, "--file", "-f", help="Plain-text transcript file"),
    stage: SalesStage = typer.Option(SalesStage.DISCOVERY, "--stage", help="Current sales stage"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show indicators and reasoning")
):
    """Classify a transcript and show the coaching recommendation."""

    data = _load_input(text, file)
    scorer = ProfileScorer()
    result = scorer.analyze_with_recommendation(data, RecommendationContext(sales_stage=stage))
    c = result.classification

    table = Table(title="Behavioral Profile")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="magenta")

    table.add_row("Profile", f"{c.profile.value} ({PROFILE_DISPLAY_NAMES[c.profile]})")
    table.add_row("Confidence", f"{c.confidence}%")
    table.add_row("Assertiveness", f"{c.axes.assertiveness:+d}")
    table.add_row("Emotionality", f"{c.axes.emotionality:+d}")

    console.print(table)

    if verbose:
        console.print(f"\n[bold]Reasoning:[/bold] {result.reasoning}")
        for indicator in result.indicators:
            console.print(f"  - {indicator}")

    _print_recommendation(result.recommendation)


@app.command()
def batch(
    input_dir: Path = typer.Option(Path("data/transcripts"), "--in", help="Input directory containing transcript files"),
    output_dir: Path = typer.Option(Path("out"), "--out", help="Output directory for reports"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output")
):
    """Classify every transcript in a directory and write JSON, CSV and Markdown reports."""

    if not input_dir.exists():
        console.print(f"[red]Error: Input directory {input_dir} does not exist[/red]")
        raise typer.Exit(1)

    all_files = sorted(list(input_dir.glob("*.txt")) + list(input_dir.glob("*.md")))
    if not all_files:
        console.print(f"[red]Error: No .md or .txt files found in {input_dir}[/red]")
        raise typer.Exit(1)

    output_dir.mkdir(parents=True, exist_ok=True)

    importer = PlaintextImporter()
    scorer = ProfileScorer()
    generator = OutputGenerator()

    results = []
    files_failed = 0

    for transcript_file in track(all_files, description="Analyzing transcripts..."):
        try:
            conversation = importer.parse_file(transcript_file)
            if not conversation.utterances:
                raise ValueError("no dialogue lines found")

            analysis = scorer.analyze_with_recommendation(conversation.to_classification_input())
            results.append(ConversationAnalysis(
                conversation_id=conversation.conversation_id,
                title=conversation.title,
                utterance_count=len(conversation.utterances),
                analysis=analysis,
                analyzed_at=datetime.now(timezone.utc),
            ))

            if verbose:
                c = analysis.classification
                console.print(f"[green]✓[/green] {transcript_file.name}: {c.profile.value} ({c.confidence}%)")

        except Exception as e:
            files_failed += 1
            console.print(f"[red]✗[/red] Failed to analyze {transcript_file.name}: {e}")

    if not results:
        console.print("[red]No transcripts were successfully analyzed[/red]")
        raise typer.Exit(1)

    json_output = output_dir / "profiles.json"
    csv_output = output_dir / "profiles.csv"
    markdown_output = output_dir / "report.md"

    generator.generate_json_output(results, json_output)
    generator.generate_csv_output(results, csv_output)
    generator.generate_report(results, markdown_output)

    table = Table(title="Profile Distribution")
    table.add_column("Profile", style="cyan")
    table.add_column("Conversations", style="magenta")
    for profile in Profile:
        count = sum(1 for r in results if r.analysis.classification.profile == profile)
        table.add_row(PROFILE_DISPLAY_NAMES[profile], str(count))
    console.print(table)

    console.print(f"\n[bold green]Batch completed![/bold green]")
    console.print(f"Files analyzed: {len(results)}")
    console.print(f"Files failed: {files_failed}")
    console.print(f"JSON output: {json_output}")
    console.print(f"CSV output: {csv_output}")
    console.print(f"Report: {markdown_output}")


@app.command()
def profile(
    text: Optional[str] = typer.Argument(None, help="Transcript text to profile"),
    file: Optional[Path] = typer.Option(None, "--file", "-f", help="Plain-text transcript file"),
    llm: bool = typer.Option(False, "--llm/--no-llm", help="Use the language model (needs OPENAI_API_KEY)")
):
    """Extended profile, personality type and combined coaching insights."""

    data = _load_input(text, file)

    client = None
    if llm:
        settings = Settings.from_env().model_copy(update={"use_llm": True})
        try:
            client = build_llm_client(settings)
        except ValueError as e:
            console.print(f"[red]Error initializing LLM client: {e}[/red]")
            raise typer.Exit(1)
        if client is None:
            console.print("[yellow]OPENAI_API_KEY not set, using local fallbacks[/yellow]")
        else:
            info = client.get_model_info()
            console.print(f"[dim]Model: {info['model']} ({info['config']['description']}), "
                          f"temperature {info['temperature']}, max tokens {info['max_tokens']}[/dim]")

    analyzer = BehavioralAnalyzer(
        ExtendedProfileClassifier(client=client, use_llm=client is not None),
        PersonalityClassifier(client=client, use_llm=client is not None),
    )
    result = analyzer.analyze_complete(data.transcript, data.conversation_history)
    ext, pers, recs = result.extended, result.personality, result.recommendations

    table = Table(title=f"Behavioral Analysis ({ext.source})")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="magenta")

    table.add_row("Profile", f"{ext.profile.value} / {ext.subtype}")
    table.add_row("Profile confidence", f"{ext.confidence}%")
    table.add_row("Attack / defense", f"{ext.axes.attack_defense:+d}")
    table.add_row("Reason / emotion", f"{ext.axes.reason_emotion:+d}")
    table.add_row("Communication style", ext.traits.communication_style)
    table.add_row("Personality type", f"{pers.type_code} ({pers.confidence}%)")
    table.add_row("Strengths", ", ".join(pers.strengths))

    console.print(table)

    console.print(f"\n[bold]Ação imediata:[/bold] {recs.immediate_action}")
    console.print(f"[bold]Script:[/bold] [italic]{recs.script}[/italic]")
    console.print(f"[bold]Estratégia:[/bold] {recs.disc_based_strategy}")
    console.print(f"[bold]Abordagem:[/bold] {recs.mbti_based_approach}")
    console.print(f"[bold]Insight:[/bold] {recs.combined_insights}")


@app.command("recommend")
def recommend_command(
    profile_label: str = typer.Argument(..., metavar="PROFILE", help="Profile label, English or Portuguese"),
    stage: SalesStage = typer.Option(SalesStage.DISCOVERY, "--stage", help="Current sales stage")
):
    """Show the coaching template for a profile."""

    resolved = normalize_profile(profile_label)
    if resolved is None:
        console.print(f"[yellow]Unknown profile '{profile_label}', showing ANALYTICAL template[/yellow]")

    rec = recommend(resolved, RecommendationContext(sales_stage=stage))
    console.print(f"[bold]{(resolved or Profile.ANALYTICAL).value}[/bold] - {stage.value}")
    _print_recommendation(rec)


if __name__ == "__main__":
    app()

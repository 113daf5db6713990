#!/usr/bin/env python3
"""
CLI Interface - Interactive command-line tutor.

This module provides a terminal interface for the Network Security Tutor.
It supports:
- Free-form questions about the course documents
- Interactive quizzes with grading (/quiz)
- Topic and database listings (/topics, /stats)
- Loading the documents directory (/ingest)

Run with:
    python -m netsec_tutor            # interactive chat
    python -m netsec_tutor serve      # web API
    python -m netsec_tutor ingest     # load documents and print stats
"""

import argparse
import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.markdown import Markdown
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from netsec_tutor.config import DEFAULT_QUIZ_SIZE, DOCS_DIR, LOG_LEVEL
from netsec_tutor.embeddings.embedder import Embedder
from netsec_tutor.embeddings.vector_store import VectorStore
from netsec_tutor.ingestion.processor import DocumentProcessor, IngestReport, ingest_directory
from netsec_tutor.quiz.agent import QuizAgent
from netsec_tutor.rag.generator import Generator
from netsec_tutor.rag.retriever import Retriever
from netsec_tutor.rag.tutor import TutorAgent
from netsec_tutor.sanitize import sanitize_input

console = Console()


def setup_logging(level: str = LOG_LEVEL) -> None:
    """Route library logging through rich."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
    )


class TutorSession:
    """Everything one CLI session needs, wired around a single vector store."""

    def __init__(self, docs_dir: Path, model: str | None = None):
        self.docs_dir = docs_dir
        self.store = VectorStore()
        self.embedder = Embedder()
        self.generator = Generator(model=model)
        self.processor = DocumentProcessor(embedder=self.embedder)
        self.tutor = TutorAgent(Retriever(self.embedder, self.store), self.generator)
        self.quiz_agent = QuizAgent(self.generator)

    def ingest(self, force: bool = False) -> IngestReport:
        return ingest_directory(self.docs_dir, self.processor, self.store, force=force)


def print_welcome():
    welcome_text = """
[bold blue]Welcome to the Network Security Tutor![/bold blue]

Ask anything about the course material, or test yourself with a quiz.

[dim]Type /help for all commands[/dim]
"""
    console.print(Panel(welcome_text, border_style="blue"))


def print_help():
    table = Table(title="Available Commands", show_header=True, header_style="bold cyan")
    table.add_column("Command", style="cyan")
    table.add_column("Description", style="white")
    table.add_column("Example", style="dim")

    commands = [
        ("(any question)", "Ask about the course documents", "What is a firewall?"),
        ("/quiz [topic] [n]", "Take an n-question quiz", "/quiz Firewalls 3"),
        ("/topics", "Show topics found in the documents", "/topics"),
        ("/stats", "Show database statistics", "/stats"),
        ("/ingest", "Reload the documents directory", "/ingest"),
        ("/clear", "Clear the screen", "/clear"),
        ("/help", "Show this help message", "/help"),
        ("/exit", "Exit the tutor", "/exit"),
    ]
    for cmd, desc, example in commands:
        table.add_row(cmd, desc, example)

    console.print(table)


def parse_command(user_input: str) -> tuple[str, list[str]]:
    """
    Parse user input into command and arguments.

    Returns:
        Tuple of (command, arguments). For regular questions, command is 'ask'.
    """
    user_input = user_input.strip()

    if not user_input:
        return ("empty", [])

    if user_input.startswith("/"):
        parts = user_input[1:].split(maxsplit=1)
        command = parts[0].lower() if parts else ""
        args = parts[1].split() if len(parts) > 1 else []
        return (command, args)

    return ("ask", [user_input])


def parse_quiz_args(args: list[str]) -> tuple[str | None, int]:
    """
    Split /quiz arguments into (topic, count).

    A trailing integer is the question count; everything before it is the
    topic, so multi-word topics like "Intrusion Detection" work.
    """
    count = DEFAULT_QUIZ_SIZE
    if args and args[-1].isdigit():
        count = max(1, int(args[-1]))
        args = args[:-1]
    topic = " ".join(args) or None
    return topic, count


def handle_ask(session: TutorSession, question: str):
    question = sanitize_input(question)
    if not question:
        console.print("[yellow]Nothing left to ask after removing markup. Try rephrasing.[/yellow]")
        return

    with console.status("[bold green]Thinking...", spinner="dots"):
        response = session.tutor.answer_question(question)

    console.print("\n[bold green]Tutor:[/bold green]")
    console.print(Markdown(response.answer))

    if response.citations:
        sources = ", ".join(
            c.source if c.page is None else f"{c.source} (p. {c.page})" for c in response.citations
        )
        console.print(f"[dim]Sources: {sources}[/dim]")
    console.print(f"[dim]Confidence: {response.confidence}%[/dim]")


def handle_quiz(session: TutorSession, args: list[str]):
    topic, count = parse_quiz_args(args)
    chunks = session.store.get_chunks_by_topic(topic) if topic else session.store.get_all_chunks()
    if not chunks:
        chunks = session.store.get_all_chunks()
    if not chunks:
        console.print("[yellow]No documents loaded. Run /ingest first.[/yellow]")
        return

    console.print(f"\n[cyan]Generating {count} quiz questions{f' about {topic}' if topic else ''}...[/cyan]")
    with console.status("[bold green]Thinking...", spinner="dots"):
        quiz = session.quiz_agent.generate_quiz(chunks, count=count, topic=topic)

    total = 0
    for number, question in enumerate(quiz.questions, 1):
        console.print(f"\n[bold]Q{number} ({question.type}, {question.topic}):[/bold] {question.question}")
        if question.options:
            for letter, option in zip("ABCD", question.options):
                console.print(f"  {letter}) {option}")
            raw = Prompt.ask("[bold cyan]Your answer (letter or text)[/bold cyan]")
            answer = _resolve_option(raw, question.options)
        elif question.type == "true-false":
            answer = Prompt.ask("[bold cyan]True or False[/bold cyan]")
        else:
            answer = Prompt.ask("[bold cyan]Your answer[/bold cyan]")

        with console.status("[bold green]Grading...", spinner="dots"):
            result = session.quiz_agent.grade_answer(
                question.question, answer, question.correct_answer, question.type
            )
        total += result.score
        style = "green" if result.is_correct else "red"
        console.print(f"[{style}]Score: {result.score}[/{style}] {result.feedback}")

    if quiz.questions:
        console.print(f"\n[bold]Quiz score: {total / len(quiz.questions):.0f}/100[/bold]")


def _resolve_option(raw: str, options: list[str]) -> str:
    """Map a letter answer (A-D) to the option text."""
    letter = raw.strip().upper()
    if len(letter) == 1 and "A" <= letter <= "D" and ord(letter) - ord("A") < len(options):
        return options[ord(letter) - ord("A")]
    return raw


def handle_topics(session: TutorSession):
    topics = session.store.get_stats()["topics"]
    if topics:
        console.print("\n[bold]Topics:[/bold]")
        for topic in topics:
            console.print(f"  • {topic}")
    else:
        console.print("[yellow]No topics found. Run /ingest first.[/yellow]")


def handle_stats(session: TutorSession):
    stats = session.store.get_stats()

    table = Table(title="Database Statistics", show_header=True, header_style="bold cyan")
    table.add_column("Metric", style="white")
    table.add_column("Value", style="green")

    table.add_row("Documents", str(stats["total_documents"]))
    table.add_row("Total Chunks", str(stats["total_chunks"]))
    table.add_row("Topics", str(len(stats["topics"])))
    table.add_row("Documents Directory", str(session.docs_dir))
    table.add_row("Model", session.generator.model)

    console.print(table)


def print_report(report: IngestReport):
    if report.skipped:
        console.print("[dim]Documents already loaded.[/dim]")
        return
    console.print(f"[green]✓ Processed {report.processed_count} documents[/green]")
    for filename, error in report.failed.items():
        console.print(f"[red]✗ {filename}: {error}[/red]")


def handle_ingest(session: TutorSession, force: bool = False):
    try:
        with console.status("[bold green]Loading documents...", spinner="dots"):
            report = session.ingest(force=force)
    except FileNotFoundError as e:
        console.print(f"[red]{e}[/red]")
        return
    print_report(report)


def run_chat(session: TutorSession):
    """Main interactive loop."""
    print_welcome()

    if not session.generator.is_available():
        console.print("[yellow]Warning: cannot reach Ollama. Make sure it is running: ollama serve[/yellow]")

    handle_ingest(session)
    if session.store.count == 0:
        console.print("[red]Vector store is empty![/red]")
        console.print(f"[yellow]Put PDF or text files in {session.docs_dir} and run /ingest.[/yellow]")
    else:
        console.print(f"[dim]Loaded {session.store.count} chunks from the course documents[/dim]")

    console.print()

    while True:
        try:
            user_input = Prompt.ask("[bold cyan]You[/bold cyan]")
            command, args = parse_command(user_input)

            if command == "empty":
                continue
            elif command in ("exit", "quit"):
                console.print("\n[bold blue]Goodbye! Stay secure![/bold blue]")
                break
            elif command == "help":
                print_help()
            elif command == "clear":
                console.clear()
                print_welcome()
            elif command == "quiz":
                handle_quiz(session, args)
            elif command == "topics":
                handle_topics(session)
            elif command == "stats":
                handle_stats(session)
            elif command == "ingest":
                handle_ingest(session, force=True)
            elif command == "ask":
                handle_ask(session, args[0])
            else:
                console.print("[yellow]Unknown command. Type /help for available commands.[/yellow]")

            console.print()

        except KeyboardInterrupt:
            console.print("\n\n[bold blue]Goodbye! Stay secure![/bold blue]")
            break


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="netsec_tutor", description="Network Security Tutor")
    parser.add_argument("--docs", type=Path, default=DOCS_DIR, help="Directory of course documents")
    parser.add_argument("--model", default=None, help="Ollama model name")
    parser.add_argument("--log-level", default=LOG_LEVEL, help="Logging level")

    sub = parser.add_subparsers(dest="command")
    sub.add_parser("chat", help="Interactive tutor (default)")
    serve = sub.add_parser("serve", help="Run the web API")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    sub.add_parser("ingest", help="Load the documents and print statistics")
    return parser


def main(argv: list[str] | None = None):
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    if args.command == "serve":
        import uvicorn

        from netsec_tutor.interfaces.web_app import create_app

        app = create_app(generator=Generator(model=args.model), docs_dir=args.docs, ingest_on_startup=True)
        uvicorn.run(app, host=args.host, port=args.port)
        return

    session = TutorSession(docs_dir=args.docs, model=args.model)
    if args.command == "ingest":
        handle_ingest(session)
        handle_stats(session)
        return

    run_chat(session)


if __name__ == "__main__":
    main()

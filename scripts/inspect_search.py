#!/usr/bin/env python3
"""
Debug script to inspect what the retrieval pipeline sees.

Loads the documents directory into a fresh in-memory store, then lets you:
- View the chunks extracted from a given file
- Run a semantic search and see every score (including those below the floor)
- Run an exact text search over chunk contents

Run with:
    python scripts/inspect_search.py [--docs DIR]
"""

import argparse
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from netsec_tutor.config import DOCS_DIR, MIN_SIMILARITY_SCORE
from netsec_tutor.embeddings.embedder import Embedder
from netsec_tutor.embeddings.vector_store import VectorStore
from netsec_tutor.ingestion.processor import DocumentProcessor, ingest_directory

console = Console()


def show_stats(store: VectorStore) -> list[str]:
    stats = store.get_stats()
    sources = sorted({chunk.filename for chunk in store.get_all_chunks()})

    table = Table(title="Database Statistics")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Documents", str(stats["total_documents"]))
    table.add_row("Total Chunks", str(stats["total_chunks"]))
    table.add_row("Topics", ", ".join(stats["topics"]) or "-")
    console.print(table)

    console.print("\n[bold]Source Files:[/bold]")
    for source in sources:
        console.print(f"  • {source}")
    return sources


def show_chunks_by_source(store: VectorStore, source_file: str, limit: int = 10):
    chunks = [c for c in store.get_all_chunks() if c.filename == source_file]
    if not chunks:
        console.print(f"[yellow]No chunks found for {source_file}[/yellow]")
        return

    console.print(f"[green]Found {len(chunks)} chunks (showing up to {limit})[/green]\n")
    for chunk in chunks[:limit]:
        console.print(
            f"[bold]{chunk.id}[/bold] (page {chunk.page_number or '?'}, topics: {', '.join(chunk.topics)})"
        )
        console.print(f"[dim]{chunk.text[:500]}...[/dim]" if len(chunk.text) > 500 else f"[dim]{chunk.text}[/dim]")
        console.print()


def semantic_search(store: VectorStore, embedder: Embedder, query: str):
    # Floor of -1 shows every score; the real pipeline drops those below MIN_SIMILARITY_SCORE
    results = store.search(embedder.embed(query), top_k=10, min_score=-1.0)
    if not results:
        console.print("[yellow]No results found[/yellow]")
        return

    for i, result in enumerate(results, 1):
        style = "green" if result.score >= MIN_SIMILARITY_SCORE else "red"
        console.print(f"[bold]Result {i}[/bold] ([{style}]score: {result.score:.4f}[/{style}])")
        console.print(f"  Source: {result.source_file}, Page {result.page_number or '?'}")
        console.print(f"  [dim]{result.text[:300]}...[/dim]")
        console.print()


def text_search(store: VectorStore, search_term: str):
    needle = search_term.lower()
    matches = [c for c in store.get_all_chunks() if needle in c.text.lower()]
    if not matches:
        console.print(f"[yellow]No chunks contain '{search_term}'[/yellow]")
        return

    console.print(f"[green]Found {len(matches)} chunks containing '{search_term}':[/green]\n")
    for i, chunk in enumerate(matches[:10], 1):
        idx = chunk.text.lower().find(needle)
        snippet = chunk.text[max(0, idx - 100) : idx + len(search_term) + 100]
        console.print(f"[bold]Match {i}[/bold] ({chunk.filename}, page {chunk.page_number or '?'}):")
        console.print(f"  ...{snippet}...")
        console.print()


def main():
    parser = argparse.ArgumentParser(description="Inspect retrieval over the course documents")
    parser.add_argument("--docs", type=Path, default=DOCS_DIR)
    args = parser.parse_args()

    console.print(Panel.fit(
        "[bold blue]Retrieval Debug Tool[/bold blue]\n"
        "Inspect chunks and similarity scores",
        border_style="blue",
    ))

    store = VectorStore()
    embedder = Embedder()
    with console.status("[bold green]Loading documents...", spinner="dots"):
        report = ingest_directory(args.docs, DocumentProcessor(embedder=embedder), store)
    for filename, error in report.failed.items():
        console.print(f"[red]✗ {filename}: {error}[/red]")

    sources = show_stats(store)

    console.print("\n[bold]Options:[/bold]")
    console.print("  1. View chunks from a specific file")
    console.print("  2. Semantic search (like the tutor)")
    console.print("  3. Text search (exact match)")
    console.print("  4. Exit")

    while True:
        choice = Prompt.ask("\n[cyan]Choose option[/cyan]", choices=["1", "2", "3", "4"])

        if choice == "1":
            console.print(f"\nAvailable sources: {', '.join(sources)}")
            source = Prompt.ask("[cyan]Enter source file name[/cyan]")
            limit = int(Prompt.ask("[cyan]How many chunks to show?[/cyan]", default="10"))
            show_chunks_by_source(store, source, limit)
        elif choice == "2":
            semantic_search(store, embedder, Prompt.ask("[cyan]Enter search query[/cyan]"))
        elif choice == "3":
            text_search(store, Prompt.ask("[cyan]Enter text to search for[/cyan]"))
        else:
            break


if __name__ == "__main__":
    main()

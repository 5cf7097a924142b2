"""Capa CLI (Typer + Rich): comandos, prompts y presentación."""

__version__ = "0.1.0"

"""Stock AI scoring service: deterministic scoring over LLM-sourced metrics."""

__version__ = "1.0.0"

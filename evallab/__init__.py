"""EvalLab: evaluation workbench for LLM projects."""

__version__ = "0.1.0"

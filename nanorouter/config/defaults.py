"""Packaged default scoring dimensions and tier targets."""

from typing import Any


def default_dimensions() -> dict[str, dict[str, Any]]:
    """Default 15-dimension scoring table (weights sum to 1.0)."""
    return {
        "cognitive_load": {
            "weight": 0.16,
            "escalation": True,
            "keywords": [
                "prove", "proof", "step by step", "derive", "derivation", "theorem",
                "lemma", "reason through", "think through", "chain of thought",
                "rigorous", "formally", "from first principles", "by induction",
            ],
        },
        "code_presence": {
            "weight": 0.14,
            "keywords": [
                "function", "class ", "def ", "import ", "return ", "compile", "debug",
                "refactor", "typescript", "python", "javascript", "rust", "sql",
                "regex", "stack trace", "unit test",
            ],
            "patterns": [r"```[\s\S]*?```", r"\b[a-z_][a-z0-9_]*\([^()]*\)"],
        },
        "technical_depth": {
            "weight": 0.10,
            "keywords": [
                "algorithm", "architecture", "distributed", "concurrency", "latency",
                "scalability", "kubernetes", "database", "protocol", "microservice",
                "complexity", "optimization", "race condition", "memory leak",
            ],
        },
        "multi_step": {
            "weight": 0.09,
            "keywords": [
                "first", "then", "next", "finally", "after that", "step 1", "step 2",
                "phase", "pipeline", "workflow",
            ],
            "patterns": [r"(?:^|\n)\s*\d+[.)]\s"],
        },
        "contextual_depth": {"weight": 0.08, "detector": "length"},
        "analytical_reasoning": {
            "weight": 0.08,
            "keywords": [
                "analyze", "analyse", "compare", "evaluate", "trade-off", "tradeoff",
                "pros and cons", "critique", "assess", "implications", "root cause",
            ],
        },
        "interrogative_depth": {
            "weight": 0.06,
            "detector": "interrogative",
            "keywords": ["why", "how does", "what if", "explain", "what would happen", "in what way"],
        },
        "constraint_density": {
            "weight": 0.06,
            "keywords": [
                "must", "at least", "at most", "without", "exactly", "constraint",
                "requirement", "ensure", "guarantee", "no more than",
            ],
            "patterns": [r"\bO\([^)]+\)"],
        },
        "domain_specificity": {
            "weight": 0.05,
            "keywords": [
                "quantum", "genomics", "cryptograph", "legal", "medical", "clinical",
                "financial", "thermodynamic", "compiler", "bioinformatics",
            ],
        },
        "creative_synthesis": {
            "weight": 0.04,
            "keywords": ["story", "poem", "imagine", "brainstorm", "design a", "invent", "creative"],
        },
        "output_structure": {
            "weight": 0.04,
            "keywords": ["json", "yaml", "table", "markdown", "csv", "schema", "diagram", "bullet points"],
        },
        "mathematical_notation": {
            "weight": 0.04,
            "keywords": ["equation", "integral", "derivative", "matrix", "probability", "eigen"],
            "patterns": [r"\d+\s*[-+*/^=]\s*\d+", r"[∑∫√≤≥≠]"],
        },
        "multi_turn_state": {
            "weight": 0.03,
            "detector": "multi_turn",
            "keywords": ["as i said", "as mentioned", "earlier", "previous", "you said", "go back to", "continue"],
        },
        "urgency": {
            "weight": 0.02,
            "keywords": ["urgent", "asap", "immediately", "right now", "deadline", "critical"],
        },
        "agentic_intent": {
            "weight": 0.01,
            "keywords": ["search the web", "browse", "execute", "deploy", "run the", "use the tool"],
        },
    }


def default_tiers() -> dict[str, dict[str, Any]]:
    """Default per-tier targets."""
    return {
        "efficient": {
            "primary": "google/gemini-2.5-flash-lite",
            "fallbacks": ["deepseek/deepseek-chat-v3-0324"],
            "max_context": 1_000_000,
            "cost_per_m": 0.10,
        },
        "balanced": {
            "primary": "openai/gpt-4.1-mini",
            "fallbacks": ["openai/gpt-4o-mini"],
            "max_context": 1_000_000,
            "cost_per_m": 0.40,
        },
        "advanced": {
            "primary": "anthropic/claude-sonnet-4.5",
            "fallbacks": ["anthropic/claude-sonnet-4", "openai/gpt-4.1"],
            "max_context": 200_000,
            "cost_per_m": 3.0,
        },
        "reasoning": {
            "primary": "openai/o3",
            "fallbacks": ["anthropic/claude-opus-4.1"],
            "max_context": 200_000,
            "cost_per_m": 10.0,
        },
    }

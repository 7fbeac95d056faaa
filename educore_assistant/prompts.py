"""System prompt for the signup assistant."""

from __future__ import annotations

from decimal import Decimal

MINIMUM_WAGE = Decimal("1412.00")
MINIMUM_WAGE_YEAR = 2024

# Maximum per-capita family income, in minimum wages, for a fee waiver.
FEE_WAIVER_THRESHOLDS: dict[str, Decimal] = {
    "FUVEST": Decimal("1.5"),
    "UNICAMP": Decimal("1.5"),
    "UNESP": Decimal("2"),
    "ENEM": Decimal("0.5"),
}

QUICK_ACTIONS: list[dict[str, str]] = [
    {
        "label": "Calcular renda per capita",
        "message": (
            "Me ajude a calcular minha renda per capita familiar. "
            "Quais informações você precisa?"
        ),
    },
    {
        "label": "Sobre isenção de taxas",
        "message": (
            "Quais são os critérios para conseguir isenção de taxas nos "
            "vestibulares?"
        ),
    },
]


def format_brl(value: Decimal) -> str:
    """Format a value as Brazilian reais, e.g. ``R$ 1.412,00``."""
    formatted = f"{value:,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
    return f"R$ {formatted}"


def format_threshold(multiple: Decimal) -> str:
    if multiple == Decimal("0.5"):
        return "meio salário mínimo"
    number = f"{multiple.normalize():f}".replace(".", ",")
    unit = "salários mínimos" if multiple >= 2 else "salário mínimo"
    return f"{number} {unit}"


def build_system_prompt(context: str | None = None) -> str:
    """
    Render the assistant system prompt.

    Args:
        context: Free-text description of where the user is in the signup
            flow; appended as its own line when given.
    """
    waiver_lines = "\n".join(
        f"   - {exam}: Renda per capita até {format_threshold(multiple)}"
        for exam, multiple in FEE_WAIVER_THRESHOLDS.items()
    )

    prompt = f"""Você é um assistente educacional do EduCore, uma plataforma de preparação para vestibulares e ETEC.

Seu papel é ajudar estudantes durante o processo de cadastro, especialmente:

1. **Cálculo de Renda Per Capita Familiar**:
   - Renda per capita = Renda Bruta Familiar Mensal ÷ Número de pessoas na família
   - Explique de forma clara e didática
   - Ajude a identificar todas as fontes de renda da família
   - O salário mínimo atual ({MINIMUM_WAGE_YEAR}) é {format_brl(MINIMUM_WAGE)}

2. **Orientação sobre Isenção de Taxas**:
{waiver_lines}

3. **Dúvidas sobre o Cadastro**:
   - Ajude com dúvidas sobre preenchimento de campos
   - Explique a importância de cada informação
   - Seja acolhedor e paciente

Responda sempre em português brasileiro, de forma clara, objetiva e amigável.
Use formatação quando apropriado (listas, negrito para valores importantes).
Mantenha respostas concisas mas completas.
"""

    if context:
        prompt += f"\nContexto atual do usuário: {context}"
    return prompt

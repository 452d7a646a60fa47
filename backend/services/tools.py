"""Credit calculator and the credit rating widget."""

from __future__ import annotations

import random
from typing import Optional

from backend.errors import ValidationError

MIN_SCORE = 300
MAX_SCORE = 850

# (threshold, label, description), highest first
RATING_TIERS = (
    (750, "Отличный", "У вас высокие шансы на одобрение любых кредитных продуктов."),
    (650, "Хороший", "Вам доступны большинство карт и кредитов с хорошими ставками."),
    (550, "Средний", "Могут потребоваться дополнительные документы для одобрения."),
    (MIN_SCORE, "Низкий", "Рекомендуем начать с микрозаймов для улучшения истории."),
)


def credit_calculator(amount: float, annual_rate: float, term_months: int) -> dict:
    """Annuity payment schedule summary."""
    if amount is None or amount <= 0 or not term_months or term_months <= 0:
        raise ValidationError("Сумма и срок должны быть больше нуля")
    if annual_rate < 0:
        raise ValidationError("Ставка не может быть отрицательной")

    n = int(term_months)
    r = annual_rate / 100 / 12
    if r == 0:
        monthly = amount / n
    else:
        growth = (1 + r) ** n
        monthly = amount * r * growth / (growth - 1)

    total = monthly * n
    return {
        "monthly_payment": round(monthly, 2),
        "total_payment": round(total, 2),
        "overpayment": round(total - amount, 2),
    }


def credit_rating(score: int) -> dict:
    for threshold, label, description in RATING_TIERS:
        if score >= threshold:
            break
    progress = (score - MIN_SCORE) / (MAX_SCORE - MIN_SCORE) * 100
    return {
        "score": score,
        "label": label,
        "description": description,
        "progress": round(max(0.0, min(100.0, progress)), 1),
    }


def simulate_score(rng: Optional[random.Random] = None) -> int:
    return (rng or random).randint(MIN_SCORE, MAX_SCORE)

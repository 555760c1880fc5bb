"""Rule-based extraction of transactions from transcribed speech.

The parser receives a finalized transcript (speech capture happens elsewhere)
plus the transaction type the user was recording, and returns a
:class:`~finance_tracker.models.ParsedTransaction` or ``None`` when no usable
amount can be found. Each stage is first-match-wins over fixed, ordered
rules:

1. amount: unit patterns in priority order (元, 块钱, 块, 毛/角, 分, bare
   number), with 分 scaled by 1/100 and 毛/角 by 1/10;
2. type: income keywords before expense keywords, else the caller's hint;
3. category: ordered keyword rules, longest keyword first;
4. description: the text with every amount expression removed, or a default
   label when too little is left.

Only the first amount-pattern that matches anywhere in the text is used; it
is not the longest or best match.
"""

from __future__ import annotations

import datetime as dt
import re
from collections.abc import Sequence
from decimal import Decimal, InvalidOperation

from .categories import CategoryCatalog
from .logging_setup import get_logger
from .models import ParsedTransaction, Transaction, TransactionType
from .money import quantize

_logger = get_logger("finance_tracker.voice_parser")

# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------

# Digits with optional thousands separators and an optional decimal part.
_NUM = r"[0-9][0-9,]*\.?[0-9]*"

AMOUNT_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(rf"({_NUM})\s*元"),
    re.compile(rf"({_NUM})\s*块\s*钱?"),
    re.compile(rf"({_NUM})\s*块"),
    re.compile(rf"({_NUM})\s*[毛角]"),
    re.compile(r"([0-9][0-9,]*)\s*分"),
    re.compile(rf"({_NUM})"),
)

_NON_NUMERIC_RE = re.compile(r"[^0-9.]")
_WS_RE = re.compile(r"\s+")

INCOME_KEYWORDS: tuple[str, ...] = (
    "收入",
    "赚",
    "得到",
    "获得",
    "工资",
    "奖金",
    "红包",
    "转账收到",
)

EXPENSE_KEYWORDS: tuple[str, ...] = (
    "花",
    "花了",
    "买",
    "支出",
    "付",
    "消费",
    "花费",
    "购买",
    "支付",
    "转账",
)

# (keyword, category name) in declaration order. Matching tries longer
# keywords first; equal lengths keep this order.
CATEGORY_RULES: tuple[tuple[str, str], ...] = (
    # 餐饮
    ("吃", "餐饮"),
    ("饭", "餐饮"),
    ("餐", "餐饮"),
    ("喝", "餐饮"),
    ("咖啡", "餐饮"),
    ("奶茶", "餐饮"),
    ("早餐", "餐饮"),
    ("午餐", "餐饮"),
    ("晚餐", "餐饮"),
    ("夜宵", "餐饮"),
    # 交通
    ("打车", "交通"),
    ("地铁", "交通"),
    ("公交", "交通"),
    ("出租车", "交通"),
    ("滴滴", "交通"),
    ("油费", "交通"),
    ("停车", "交通"),
    ("高速", "交通"),
    ("火车", "交通"),
    ("飞机", "交通"),
    ("充电", "交通"),
    # 购物
    ("衣服", "购物"),
    ("鞋", "购物"),
    ("包", "购物"),
    ("化妆品", "购物"),
    ("护肤", "购物"),
    ("书", "购物"),
    ("文具", "购物"),
    ("电子", "购物"),
    ("手机", "购物"),
    ("电脑", "购物"),
    # 娱乐
    ("电影", "娱乐"),
    ("游戏", "娱乐"),
    ("KTV", "娱乐"),
    ("旅游", "娱乐"),
    ("健身", "娱乐"),
    # 居住 / 医疗
    ("房租", "居住"),
    ("水费", "居住"),
    ("电费", "居住"),
    ("燃气", "居住"),
    ("物业", "居住"),
    ("医院", "医疗"),
    ("药", "医疗"),
    ("看病", "医疗"),
    ("体检", "医疗"),
    # 收入类别
    ("工资", "工资"),
    ("奖金", "奖金"),
    ("红包", "红包"),
    ("兼职", "兼职"),
    ("投资", "投资"),
)

DEFAULT_DESCRIPTION = "语音记录"
_MIN_DESCRIPTION_LEN = 2


def _by_priority(rules: Sequence[tuple[str, str]]) -> tuple[tuple[str, str], ...]:
    # sorted() is stable, so equal-length keywords keep declaration order.
    return tuple(
        (kw.casefold(), cat) for kw, cat in sorted(rules, key=lambda r: -len(r[0]))
    )


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


class VoiceTransactionParser:
    """Parse transcripts such as ``"午饭花了30元"`` into transactions.

    Rule tables can be overridden per instance; the defaults are the module
    constants above.
    """

    def __init__(
        self,
        *,
        income_keywords: Sequence[str] = INCOME_KEYWORDS,
        expense_keywords: Sequence[str] = EXPENSE_KEYWORDS,
        category_rules: Sequence[tuple[str, str]] = CATEGORY_RULES,
    ) -> None:
        self._income_keywords = tuple(income_keywords)
        self._expense_keywords = tuple(expense_keywords)
        self._category_rules = _by_priority(category_rules)

    def parse(self, text: str, expected_type: TransactionType) -> ParsedTransaction | None:
        """Return the structured transaction, or ``None`` when no amount of at least one cent is found."""

        clean = text.strip()
        if not clean:
            return None

        amount = self.extract_amount(clean)
        if amount is None:
            _logger.debug("voice:no_amount text=%r", clean)
            return None
        amount = quantize(amount)
        if amount <= 0:
            _logger.debug("voice:non_positive_amount text=%r amount=%s", clean, amount)
            return None

        tx_type = self.infer_type(clean, expected_type)
        category = self.infer_category(clean)
        description = self.describe(clean, category)
        return ParsedTransaction(
            amount=amount, category=category, description=description, type=tx_type
        )

    # ---- Stages ------------------------------------------------------------

    def extract_amount(self, text: str) -> Decimal | None:
        for pattern in AMOUNT_PATTERNS:
            m = pattern.search(text)
            if m is None:
                continue
            matched = m.group(0)
            digits = _NON_NUMERIC_RE.sub("", matched)
            try:
                amount = Decimal(digits)
            except InvalidOperation:
                return None
            if "分" in matched:
                return amount / 100
            if "毛" in matched or "角" in matched:
                return amount / 10
            return amount
        return None

    def infer_type(self, text: str, expected_type: TransactionType) -> TransactionType:
        lowered = text.lower()
        # Income first: "转账收到" must win over the expense keyword "转账".
        if any(kw in lowered for kw in self._income_keywords):
            return TransactionType.INCOME
        if any(kw in lowered for kw in self._expense_keywords):
            return TransactionType.EXPENSE
        return TransactionType(expected_type)

    def infer_category(self, text: str) -> str | None:
        folded = text.casefold()
        for keyword, category in self._category_rules:
            if keyword in folded:
                return category
        return None

    def describe(self, text: str, category: str | None) -> str:
        description = text
        for pattern in AMOUNT_PATTERNS:
            description = pattern.sub("", description)
        description = _WS_RE.sub(" ", description).strip()
        if len(description) < _MIN_DESCRIPTION_LEN:
            return f"{category}消费" if category else DEFAULT_DESCRIPTION
        return description


def to_transaction(
    parsed: ParsedTransaction,
    catalog: CategoryCatalog,
    *,
    on: dt.date | None = None,
) -> Transaction:
    """Build the confirmed transaction for ``parsed`` (category resolved by name)."""

    return Transaction(
        amount=parsed.amount,
        category=catalog.resolve(parsed.category, parsed.type),
        type=parsed.type,
        date=on or dt.date.today(),
        note=parsed.description,
    )


__all__ = [
    "AMOUNT_PATTERNS",
    "CATEGORY_RULES",
    "DEFAULT_DESCRIPTION",
    "EXPENSE_KEYWORDS",
    "INCOME_KEYWORDS",
    "VoiceTransactionParser",
    "to_transaction",
]

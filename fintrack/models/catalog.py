"""
Fixed Category Catalog

The core needs a handful of category names it never asks the user for:
the fallback a deleted category's transactions move to, the category of
a synthetic invoice payment, the category of a transfer. It also seeds
every new user with a default category set.

DESIGN DECISION: These names live in one immutable catalog handed to the
reducer at construction, so the reducer stays pure and the names can be
localized without touching the rules.
"""

from pydantic import BaseModel, ConfigDict

from fintrack.models.entities import Category, CategoryType


class CategoryCatalog(BaseModel):
    """Names and templates the core uses for fallbacks and synthetic records."""
    model_config = ConfigDict(frozen=True)

    locale: str
    fallback_income: str
    fallback_expense: str
    invoice_payment: str
    transfer: str
    uncategorized: str

    # Templates for synthetic transaction descriptions
    invoice_payment_description: str
    transfer_description: str

    defaults: tuple[Category, ...]

    def fallback_for(self, category_type: CategoryType) -> str:
        """Name that transactions of a deleted category are reassigned to."""
        if category_type is CategoryType.INCOME:
            return self.fallback_income
        return self.fallback_expense

    def describe_invoice_payment(self, card_name: str) -> str:
        return self.invoice_payment_description.format(card=card_name)


def _defaults(income: list[tuple[str, str]], expense: list[tuple[str, str]]) -> tuple[Category, ...]:
    categories = [
        Category(id=cat_id, name=name, type=CategoryType.INCOME, is_default=True)
        for cat_id, name in income
    ]
    categories += [
        Category(id=cat_id, name=name, type=CategoryType.EXPENSE, is_default=True)
        for cat_id, name in expense
    ]
    return tuple(categories)


ENGLISH_CATALOG = CategoryCatalog(
    locale="en",
    fallback_income="Other Income",
    fallback_expense="Other Expenses",
    invoice_payment="Invoice Payment",
    transfer="Transfer",
    uncategorized="Uncategorized",
    invoice_payment_description="Invoice payment - {card}",
    transfer_description="Transfer between accounts",
    defaults=_defaults(
        income=[
            ("cat-income-1", "Salary"),
            ("cat-income-2", "Freelance"),
            ("cat-income-3", "Investments"),
            ("cat-income-99", "Other Income"),
        ],
        expense=[
            ("cat-expense-1", "Housing"),
            ("cat-expense-2", "Food"),
            ("cat-expense-3", "Transportation"),
            ("cat-expense-4", "Leisure"),
            ("cat-expense-5", "Health"),
            ("cat-expense-6", "Education"),
            ("cat-expense-7", "Invoice Payment"),
            ("cat-expense-99", "Other Expenses"),
        ],
    ),
)

PORTUGUESE_CATALOG = CategoryCatalog(
    locale="pt_BR",
    fallback_income="Outras Receitas",
    fallback_expense="Outras Despesas",
    invoice_payment="Pagamento de Fatura",
    transfer="Transferência",
    uncategorized="Sem categoria",
    invoice_payment_description="Pagamento Fatura - {card}",
    transfer_description="Transferência entre contas",
    defaults=_defaults(
        income=[
            ("cat-income-1", "Salário"),
            ("cat-income-2", "Freelance"),
            ("cat-income-3", "Investimentos"),
            ("cat-income-99", "Outras Receitas"),
        ],
        expense=[
            ("cat-expense-1", "Moradia"),
            ("cat-expense-2", "Alimentação"),
            ("cat-expense-3", "Transporte"),
            ("cat-expense-4", "Lazer"),
            ("cat-expense-5", "Saúde"),
            ("cat-expense-6", "Educação"),
            ("cat-expense-7", "Pagamento de Fatura"),
            ("cat-expense-99", "Outras Despesas"),
        ],
    ),
)

CATALOGS = {
    ENGLISH_CATALOG.locale: ENGLISH_CATALOG,
    PORTUGUESE_CATALOG.locale: PORTUGUESE_CATALOG,
}


def get_catalog(locale: str) -> CategoryCatalog:
    """Look up a catalog by locale, defaulting to English."""
    return CATALOGS.get(locale, ENGLISH_CATALOG)

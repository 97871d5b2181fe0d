"""Default invalidation rules for the waqf management topics.

Rules are single-hop: topics added through ``affects`` never pull in the
rules of their own. When a write must reach a topic two steps away, the
topic is listed directly on the original trigger.
"""

from __future__ import annotations

from topicwarden.cache.rules import RuleTable, field_equals, field_in, rule

FINANCIAL_STATEMENTS = (
    "TRIAL_BALANCE",
    "TRIAL_BALANCE_BY_YEAR",
    "BALANCE_SHEET",
    "BALANCE_SHEET_BY_YEAR",
    "INCOME_STATEMENT",
    "INCOME_STATEMENT_BY_YEAR",
    "CASH_FLOW",
    "CASH_FLOWS",
    "GENERAL_LEDGER",
    "ACCOUNTS_WITH_BALANCES",
    "FINANCIAL_DATA",
    "FINANCIAL_KPIS",
)

DEFAULT_RULES = RuleTable(
    [
        # Beneficiaries
        rule(
            "BENEFICIARIES",
            affects=["BENEFICIARY", "BENEFICIARY_STATS", "BENEFICIARY_FAMILIES"],
            description="Beneficiary list writes refresh details and counts",
        ),
        rule(
            "BENEFICIARIES",
            affects=["UNIFIED_KPIS", "NAZER_KPIS", "ADMIN_KPIS"],
            when=field_in("status", {"active", "suspended", "inactive"}),
            description="Beneficiary status changes move dashboard counts",
        ),
        rule(
            ["FAMILIES", "FAMILY_MEMBERS"],
            affects=["BENEFICIARY_FAMILIES", "BENEFICIARY_FAMILY", "FAMILY_MEMBERS"],
        ),
        rule(
            "REQUESTS",
            affects=["REQUEST", "BENEFICIARY_REQUESTS", "PENDING_APPROVALS"],
        ),
        # Properties and contracts
        rule(
            "PROPERTIES",
            affects=["PROPERTY", "PROPERTY_STATS", "PROPERTY_UNITS"],
        ),
        rule(
            "CONTRACTS",
            affects=["PROPERTY_STATS", "RENTAL_PAYMENTS"],
            when=field_in("status", {"active", "expired"}),
            description="Status changes move occupancy and expected rent",
        ),
        rule(
            "CONTRACTS",
            affects=["TENANTS", "TENANT_LEDGER", "PROPERTY_STATS", "PROPERTY_UNITS"],
            when=field_equals("status", "terminated"),
            description="Early termination settles the tenant ledger",
        ),
        rule(
            "TENANTS",
            affects=["TENANT", "TENANTS_AGING"],
        ),
        rule(
            "MAINTENANCE_REQUESTS",
            affects=["MAINTENANCE_REQUEST", "MAINTENANCE_SCHEDULES", "PROPERTY_STATS"],
        ),
        # Collections
        rule(
            ["RENTAL_PAYMENTS", "PAYMENTS", "PAYMENT_VOUCHERS"],
            affects=[
                "RENTAL_PAYMENTS_COLLECTED",
                "RENTAL_PAYMENTS_BY_CONTRACT",
                "TENANT_LEDGER",
                "TENANTS_AGING",
                "CASHIER_KPIS",
                "UNIFIED_KPIS",
            ],
            description="Any collected amount moves ageing and cashier totals",
        ),
        rule(
            ["RENTAL_PAYMENTS", "PAYMENTS", "PAYMENT_VOUCHERS"],
            affects=["JOURNAL_ENTRIES", *FINANCIAL_STATEMENTS],
            when=field_equals("status", "paid"),
            description="Paid vouchers post journal entries",
        ),
        rule(
            "POS_TRANSACTIONS",
            affects=["POS_STATS", "CASHIER_SHIFT_ACTIVE", "CASHIER_SHIFTS", "CASHIER_KPIS"],
        ),
        # Accounting
        rule(
            "JOURNAL_ENTRIES",
            affects=["JOURNAL_ENTRY", "JOURNAL_ENTRY_LINES", "JOURNAL_APPROVALS"],
        ),
        rule(
            "JOURNAL_ENTRIES",
            affects=[*FINANCIAL_STATEMENTS, "ACCOUNTANT_KPIS"],
            when=field_equals("status", "posted"),
            description="Only posted entries reach balances and statements",
        ),
        rule(
            "ACCOUNTS",
            affects=["ACCOUNT", "ACCOUNTS_FOR_LEDGER", "JOURNAL_ENTRY_ACCOUNTS", "ACCOUNTS_WITH_BALANCES"],
        ),
        rule(
            "INVOICES",
            affects=["INVOICE"],
        ),
        rule(
            "INVOICES",
            affects=["JOURNAL_ENTRIES", *FINANCIAL_STATEMENTS, "ACCOUNTANT_KPIS"],
            when=field_in("status", {"paid", "issued"}),
            description="Issued and paid invoices are journalled automatically",
        ),
        rule(
            ["BUDGETS", "BUDGETS_BY_YEAR", "BUDGETS_BY_PERIOD"],
            affects=["BUDGETS", "BUDGETS_BY_YEAR", "BUDGETS_BY_PERIOD", "FINANCIAL_FORECASTS"],
        ),
        rule(
            ["FISCAL_YEARS", "FISCAL_YEARS_ALT"],
            affects=[
                "FISCAL_YEARS",
                "FISCAL_YEARS_ALT",
                "FISCAL_YEAR",
                "FISCAL_YEAR_ACTIVE",
                "ACTIVE_FISCAL_YEAR",
                "ACTIVE_FISCAL_YEARS",
                "FISCAL_YEAR_CLOSINGS",
            ],
        ),
        rule(
            ["BANK_STATEMENTS", "BANK_TRANSACTIONS"],
            affects=["BANK_RECONCILIATION", "BANK_ACCOUNTS", "BANK_ACCOUNT"],
        ),
        rule(
            "AUTO_JOURNAL_TEMPLATES",
            affects=["AUTO_JOURNAL_LOG"],
        ),
        # Loans, distributions and funds
        rule(
            "LOANS",
            affects=["LOAN", "LOAN_INSTALLMENTS", "LOAN_PAYMENTS", "LOANS_WITH_APPROVALS"],
        ),
        rule(
            "DISTRIBUTIONS",
            affects=[
                "DISTRIBUTION",
                "DISTRIBUTION_DETAILS",
                "HEIR_DISTRIBUTIONS",
                "DISTRIBUTIONS_WITH_APPROVALS",
                "BENEFICIARY_DISTRIBUTIONS",
            ],
        ),
        rule(
            "DISTRIBUTIONS",
            affects=[
                "FUNDS",
                "FUND_ALLOCATIONS",
                "BENEFICIARY_STATEMENTS",
                "JOURNAL_ENTRIES",
                *FINANCIAL_STATEMENTS,
                "NAZER_KPIS",
            ],
            when=field_in("status", {"approved", "paid"}),
            description="Approved distributions draw down funds and post entries",
        ),
        rule(
            "EMERGENCY_AID",
            affects=["EMERGENCY_APPROVALS", "BENEFICIARY_STATS"],
        ),
        rule(
            "APPROVALS",
            affects=[
                "PENDING_APPROVALS",
                "PENDING_APPROVALS_ALT",
                "APPROVAL_HISTORY",
                "DISTRIBUTIONS_WITH_APPROVALS",
                "JOURNAL_APPROVALS",
                "LOANS_WITH_APPROVALS",
                "EMERGENCY_APPROVALS",
            ],
        ),
        # Archive
        rule(
            "DOCUMENTS",
            affects=["DOCUMENT", "DOCUMENT_TAGS", "DOCUMENT_VERSIONS", "ARCHIVE_STATS"],
        ),
        rule(
            "GOVERNANCE",
            affects=["GOVERNANCE_DOCUMENTS"],
        ),
        # Users and messaging
        rule(
            "USER_ROLES",
            affects=["USERS", "USER", "USER_STATS", "USER_ROLES_CHATBOT"],
        ),
        rule(
            "NOTIFICATIONS",
            affects=["UNREAD_NOTIFICATIONS"],
        ),
        rule(
            "MESSAGES",
            affects=["UNREAD_MESSAGES"],
        ),
        rule(
            "SUPPORT_TICKETS",
            affects=["SUPPORT_TICKET"],
        ),
    ]
)

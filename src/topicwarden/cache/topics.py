"""Default topic catalogue.

One entry per cached query family of the waqf management frontend.
Names are the logical topics mutation callers pass in; keys are the
cache keys results are stored under.
"""

from __future__ import annotations

from topicwarden.cache.registry import (
    REALTIME_PROFILE,
    REPORTS_PROFILE,
    STATIC_PROFILE,
    Topic,
    TopicRegistry,
    parameterized_topic,
    static_topic,
)

S = static_topic
P = parameterized_topic

TOPICS: tuple[Topic, ...] = (
    # Beneficiaries
    S("BENEFICIARIES", "beneficiaries"),
    P("BENEFICIARY", "beneficiary", params=("id",)),
    S("BENEFICIARY_STATS", "beneficiary-stats"),
    S("BENEFICIARY_FAMILIES", "beneficiary-families"),
    P("BENEFICIARY_REQUESTS", "beneficiary-requests", params=("id",)),
    P("BENEFICIARY_DISTRIBUTIONS", "beneficiary-distributions", params=("id",)),
    P("BENEFICIARY_STATEMENTS", "beneficiary-statements", params=("id",)),
    P("BENEFICIARY_ATTACHMENTS", "beneficiary-attachments", params=("id",)),
    S("BENEFICIARY_ACTIVITY", "beneficiary-activity"),
    S("BENEFICIARY_SESSIONS", "beneficiary-sessions"),
    P("BENEFICIARY_TIMELINE", "beneficiary-timeline", params=("beneficiary_id",)),
    P("BENEFICIARY_FAMILY", "beneficiary-family", params=("beneficiary_id",)),
    P("ELIGIBILITY_ASSESSMENTS", "eligibility-assessments", params=("beneficiary_id",)),
    # Properties
    S("PROPERTIES", "properties"),
    P("PROPERTY", "property", params=("id",)),
    S("PROPERTY_STATS", "property-stats"),
    P("PROPERTY_UNITS", "property-units", params=("property_id",)),
    # Contracts
    S("CONTRACTS", "contracts"),
    P("CONTRACT", "contract", params=("id",)),
    # Tenants
    S("TENANTS", "tenants"),
    P("TENANT", "tenant", params=("id",)),
    P("TENANT_LEDGER", "tenant-ledger", params=("tenant_id",)),
    S("TENANTS_AGING", "tenants-aging"),
    # Rental payments
    S("RENTAL_PAYMENTS", "rental_payments"),
    P("RENTAL_PAYMENTS_BY_CONTRACT", "rental_payments", params=("contract_id",)),
    S("RENTAL_PAYMENTS_COLLECTED", "rental-payments-collected"),
    S("RENTAL_PAYMENTS_WITH_FREQUENCY", "rental-payments-with-frequency"),
    # Payments and vouchers
    S("PAYMENTS", "payments"),
    P("PAYMENT", "payment", params=("id",)),
    S("PAYMENT_VOUCHERS", "payment_vouchers"),
    P("PAYMENT_VOUCHER", "payment_voucher", params=("id",)),
    # Accounting
    S("ACCOUNTS", "accounts"),
    P("ACCOUNT", "account", params=("id",)),
    S("ACCOUNTS_FOR_LEDGER", "accounts_for_ledger"),
    S("ACCOUNTS_WITH_BALANCES", "accounts-with-balances"),
    S("JOURNAL_ENTRIES", "journal_entries"),
    P("JOURNAL_ENTRY", "journal_entry", params=("id",)),
    P("JOURNAL_ENTRY_LINES", "journal_entry_lines", params=("entry_id",)),
    S("JOURNAL_ENTRY_ACCOUNTS", "journal-entry-accounts"),
    S("TRIAL_BALANCE", "trial-balance", profile=REPORTS_PROFILE),
    P("TRIAL_BALANCE_BY_YEAR", "trial_balance", params=("fiscal_year_id",), profile=REPORTS_PROFILE),
    S("BALANCE_SHEET", "balance-sheet", profile=REPORTS_PROFILE),
    P("BALANCE_SHEET_BY_YEAR", "balance_sheet", params=("fiscal_year_id",), profile=REPORTS_PROFILE),
    S("INCOME_STATEMENT", "income-statement", profile=REPORTS_PROFILE),
    P(
        "INCOME_STATEMENT_BY_YEAR",
        "income_statement",
        params=("fiscal_year_id",),
        profile=REPORTS_PROFILE,
    ),
    S("CASH_FLOW", "cash-flow", profile=REPORTS_PROFILE),
    P("CASH_FLOWS", "cash_flows", params=("fiscal_year_id",), profile=REPORTS_PROFILE),
    S("BUDGETS", "budgets"),
    P("BUDGETS_BY_YEAR", "budgets", params=("fiscal_year_id",)),
    P("BUDGETS_BY_PERIOD", "budgets", params=("period_type",)),
    P(
        "GENERAL_LEDGER",
        "general_ledger",
        params=("account_id", "date_from", "date_to"),
        profile=REPORTS_PROFILE,
    ),
    S("FINANCIAL_DATA", "financial-data"),
    S("PENDING_APPROVALS", "pending_approvals"),
    S("PENDING_APPROVALS_ALT", "pending-approvals"),
    # Loans
    S("LOANS", "loans"),
    P("LOAN", "loan", params=("id",)),
    P("LOAN_PAYMENTS", "loan-payments", params=("loan_id",)),
    P("LOAN_INSTALLMENTS", "loan-installments", params=("loan_id",)),
    # Distributions
    S("DISTRIBUTIONS", "distributions"),
    P("DISTRIBUTION", "distribution", params=("id",)),
    P("DISTRIBUTION_DETAILS", "distribution-details", params=("id",)),
    S("HEIR_DISTRIBUTIONS", "heir-distributions"),
    # Fiscal years
    S("FISCAL_YEARS", "fiscal_years", profile=STATIC_PROFILE),
    S("FISCAL_YEARS_ALT", "fiscal-years", profile=STATIC_PROFILE),
    S("FISCAL_YEAR_ACTIVE", ("fiscal-year", "active"), profile=STATIC_PROFILE),
    S("ACTIVE_FISCAL_YEAR", "active-fiscal-year", profile=STATIC_PROFILE),
    S("ACTIVE_FISCAL_YEARS", "active-fiscal-years", profile=STATIC_PROFILE),
    P("FISCAL_YEAR", "fiscal-year", params=("id",), profile=STATIC_PROFILE),
    S("FISCAL_YEAR_CLOSINGS", "fiscal-year-closings"),
    # Bank
    S("BANK_ACCOUNTS", "bank_accounts"),
    P("BANK_ACCOUNT", "bank_account", params=("id",)),
    S("BANK_STATEMENTS", "bank-statements"),
    S("BANK_TRANSACTIONS", "bank-transactions"),
    S("BANK_RECONCILIATION", "bank-reconciliation"),
    # Invoices
    S("INVOICES", "invoices"),
    P("INVOICE", "invoice", params=("id",)),
    # Maintenance
    S("MAINTENANCE_REQUESTS", "maintenance-requests"),
    P("MAINTENANCE_REQUEST", "maintenance-request", params=("id",)),
    S("MAINTENANCE_PROVIDERS", "maintenance-providers"),
    S("MAINTENANCE_SCHEDULES", "maintenance-schedules"),
    # Funds
    S("FUNDS", "funds"),
    P("FUND", "fund", params=("id",)),
    S("FUND_ALLOCATIONS", "fund-allocations"),
    # Archive
    S("DOCUMENTS", "documents"),
    P("DOCUMENT", "document", params=("id",)),
    S("ARCHIVE_STATS", "archive-stats"),
    P("DOCUMENT_TAGS", "document-tags", params=("document_id",)),
    P("DOCUMENT_VERSIONS", "document-versions", params=("document_id",)),
    # Users and auth
    S("USERS", "users"),
    P("USER", "user", params=("id",)),
    S("USER_ROLES", "user-roles"),
    S("USER_STATS", "user-stats"),
    S("PROFILES", "profiles"),
    # Notifications
    S("NOTIFICATIONS", "notifications"),
    S("NOTIFICATION_SETTINGS", "notification-settings", profile=STATIC_PROFILE),
    S("UNREAD_NOTIFICATIONS", "unread-notifications", profile=REALTIME_PROFILE),
    # Requests
    S("REQUESTS", "requests"),
    P("REQUEST", "request", params=("id",)),
    S("REQUEST_TYPES", "request-types", profile=STATIC_PROFILE),
    # Reports
    S("REPORTS", "reports", profile=REPORTS_PROFILE),
    P("REPORT", "report", params=("id",), profile=REPORTS_PROFILE),
    P("REPORT_TEMPLATES", "report_templates", params=("report_type",), profile=STATIC_PROFILE),
    S("ANNUAL_DISCLOSURES", "annual-disclosures", profile=REPORTS_PROFILE),
    # Dashboard KPIs
    S("UNIFIED_KPIS", "unified-dashboard-kpis", profile=REALTIME_PROFILE),
    S("NAZER_KPIS", "nazer-kpis", profile=REALTIME_PROFILE),
    S("ADMIN_KPIS", "admin-kpis", profile=REALTIME_PROFILE),
    S("ACCOUNTANT_KPIS", "accountant-kpis", profile=REALTIME_PROFILE),
    S("CASHIER_KPIS", "cashier-kpis", profile=REALTIME_PROFILE),
    # System
    S("SYSTEM_SETTINGS", "system-settings", profile=STATIC_PROFILE),
    S("SYSTEM_HEALTH", "system-health", profile=REALTIME_PROFILE),
    S("AUDIT_LOGS", "audit-logs"),
    S("ACTIVITIES", "activities"),
    S("ERROR_LOGS", "error-logs"),
    # Organization
    S("ORGANIZATION_SETTINGS", "organization-settings", profile=STATIC_PROFILE),
    S("TRIBES", "tribes", profile=STATIC_PROFILE),
    S("FAMILIES", "families"),
    P("FAMILY_MEMBERS", "family-members", params=("family_id",)),
    # POS
    S("CASHIER_SHIFTS", "cashier-shifts"),
    S("CASHIER_SHIFT_ACTIVE", ("cashier-shift", "active"), profile=REALTIME_PROFILE),
    S("POS_TRANSACTIONS", "pos-transactions"),
    S("POS_STATS", "pos-stats", profile=REALTIME_PROFILE),
    # Approvals
    S("APPROVALS", "approvals"),
    S("APPROVAL_WORKFLOWS", "approval-workflows", profile=STATIC_PROFILE),
    S("APPROVAL_HISTORY", "approval-history"),
    S("DISTRIBUTIONS_WITH_APPROVALS", "distributions_with_approvals"),
    S("JOURNAL_APPROVALS", "journal_approvals"),
    S("LOANS_WITH_APPROVALS", "loans_with_approvals"),
    # Chatbot
    P("USER_ROLES_CHATBOT", "user_roles_chatbot", params=("user_id",)),
    P("CHATBOT_CONVERSATIONS", "chatbot_conversations", params=("user_id",)),
    S("CHATBOT_QUICK_REPLIES", "chatbot_quick_replies", profile=STATIC_PROFILE),
    # Messages
    S("MESSAGES", "messages"),
    S("UNREAD_MESSAGES", "unread-messages", profile=REALTIME_PROFILE),
    # Support
    S("SUPPORT_TICKETS", "support-tickets"),
    P("SUPPORT_TICKET", "support-ticket", params=("id",)),
    # Governance
    S("GOVERNANCE", "governance"),
    S("GOVERNANCE_DOCUMENTS", "governance-documents"),
    # Knowledge base
    S("KNOWLEDGE_ARTICLES", "knowledge-articles", profile=STATIC_PROFILE),
    S("PROJECT_PHASES", "project-phases", profile=STATIC_PROFILE),
    # Auto journal
    S("AUTO_JOURNAL_TEMPLATES", "auto_journal_templates", profile=STATIC_PROFILE),
    S("AUTO_JOURNAL_LOG", "auto-journal-log"),
    # AI and analytics
    S("AI_INSIGHTS", "ai-insights"),
    P("FINANCIAL_KPIS", "financial_kpis", params=("fiscal_year_id",), profile=REPORTS_PROFILE),
    S("FINANCIAL_FORECASTS", "financial_forecasts", profile=REPORTS_PROFILE),
    # Emergency aid
    S("EMERGENCY_AID", "emergency-aid"),
    S("EMERGENCY_APPROVALS", "emergency-approvals"),
)


def build_default_registry() -> TopicRegistry:
    """Registry holding the full default catalogue."""
    return TopicRegistry(TOPICS)

"""
Billing domain - subscription cycles and invoice statuses
"""
CYCLE_MONTHLY = "monthly"
CYCLE_QUARTERLY = "quarterly"
CYCLE_YEARLY = "yearly"
CYCLE_ONE_TIME = "one-time"
CYCLES = (CYCLE_MONTHLY, CYCLE_QUARTERLY, CYCLE_YEARLY, CYCLE_ONE_TIME)

INVOICE_PAID = "paid"
INVOICE_PENDING = "pending"
INVOICE_OVERDUE = "overdue"
# Any status may follow any other: there is no transition table
INVOICE_STATUSES = (INVOICE_PAID, INVOICE_PENDING, INVOICE_OVERDUE)
OPEN_INVOICE_STATUSES = (INVOICE_PENDING, INVOICE_OVERDUE)

DEFAULT_CURRENCY = "USD"
DEFAULT_CYCLE = CYCLE_MONTHLY

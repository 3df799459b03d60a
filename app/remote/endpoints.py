"""Paths on the remote pharmacy API, relative to Settings.API_BASE_URL."""

BILLING_DASHBOARD_URL = "billing-dashboard"
BILLING_PURCHASE_URL = "billing-purchase"
BILLING_SELL_URL = "billing-sell"

LOGIN = "store/login"
REGISTER = "store/register"
STORE_DETAILS = "store/details"

GET_DISTRIBUTORS = f"{BILLING_DASHBOARD_URL}/get-distributors"
ADD_DISTRIBUTOR = f"{BILLING_DASHBOARD_URL}/add-distributor"
UPDATE_DISTRIBUTOR = f"{BILLING_DASHBOARD_URL}/update-distributor"
SEARCH_DISTRIBUTORS = f"{BILLING_DASHBOARD_URL}/search-distributors"

CHECK_DUPLICATE_INVOICE = f"{BILLING_PURCHASE_URL}/check-duplicate-invoice"
CREATE_PURCHASE_ORDER = f"{BILLING_PURCHASE_URL}/create-purchase-order"
PURCHASE_ORDER = f"{BILLING_PURCHASE_URL}/purchase-order"

GET_CUSTOMERS = f"{BILLING_SELL_URL}/get-customers"
ADD_CUSTOMER = f"{BILLING_SELL_URL}/add-customer"
UPDATE_CUSTOMER = f"{BILLING_SELL_URL}/update-customer"
SEARCH_MEDICINES_STOCK = f"{BILLING_SELL_URL}/search-medicines-stock"
CHECK_DUPLICATE_SELL_INVOICE = f"{BILLING_SELL_URL}/check-duplicate-invoice"
CREATE_SELL_ORDER = f"{BILLING_SELL_URL}/create-sell-order"

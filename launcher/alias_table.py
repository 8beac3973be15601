"""Alias keys for QR payment extras.

Receiving banking apps do not publish which extra keys they read, so every
field is sent under each key that some app has been seen to use. Add new
receivers here; the delivery search never needs to change.

Bump ALIAS_TABLE_VERSION whenever a list changes.
"""

from typing import Dict, List, Tuple

ALIAS_TABLE_VERSION = 3

# Payment payload fields, in projection order.
PAYMENT_FIELDS: Tuple[str, ...] = ("bin", "accountNumber", "amount", "addInfo", "bankName")

# Data-URI tier (bankqr://data?qr=...)
DATA_URI_QR_KEYS: List[str] = ["qr_code", "QR_CODE", "qrcode", "qrData", "data"]

DATA_URI_ALIASES: Dict[str, List[str]] = {
    "bin": ["bin"],
    "accountNumber": ["account", "accountNumber", "stk", "receiver_account"],
    "amount": ["amount"],
    "addInfo": ["addInfo", "content", "note"],
    "bankName": ["bankName"],
}

# Launch-with-extras tier (plain launch handle)
LAUNCH_QR_KEYS: List[str] = [
    "qr_code",
    "QR_CODE",
    "qrcode",
    "qrData",
    "data",
    "qrcode_data",
    "scanned_data",
    "qr_string",
    "com.qhome.qr_code",
    "com.bank.qr_code",
    "com.vnpay.qr_code",
    "com.tpb.qr_code",
]

LAUNCH_ALIASES: Dict[str, List[str]] = {
    "bin": ["qr_bin", "bin", "bank_bin"],
    "accountNumber": ["qr_account", "account", "accountNumber", "stk", "receiver_account"],
    "amount": ["qr_amount", "amount", "money", "transfer_amount"],
    "addInfo": ["qr_add_info", "addInfo", "content", "note", "description", "message"],
    "bankName": ["qr_bank_name", "bankName", "bank_name"],
}

# Bank chooser: single-shot, small fixed set
BANK_CHOOSER_QR_KEYS: List[str] = ["qr_code", "QR_CODE", "qrcode"]


def aliases_for(table: Dict[str, List[str]], field_name: str) -> List[str]:
    return table.get(field_name, [])

from eth_account import Account
from eth_account.messages import encode_typed_data
from web3 import Web3

from core.constants import ZERO_ADDRESS


PERMIT_TYPES = {
    "Permit": [
        {"name": "owner", "type": "address"},
        {"name": "spender", "type": "address"},
        {"name": "value", "type": "uint256"},
        {"name": "nonce", "type": "uint256"},
        {"name": "deadline", "type": "uint256"},
    ],
}


def to_checksum(address: str) -> str:
    if not Web3.is_address(address):
        raise ValueError(f"Invalid address {address}")
    return Web3.to_checksum_address(address)


def is_zero_address(address) -> bool:
    return not address or address.lower() == ZERO_ADDRESS


def build_permit_message(
    token_name: str,
    version: str,
    chain_id: int,
    token_address: str,
    owner: str,
    spender: str,
    value: int,
    nonce: int,
    deadline: int,
) -> dict:
    return {
        "domain": {
            "name": token_name,
            "version": version,
            "chainId": chain_id,
            "verifyingContract": token_address,
        },
        "types": PERMIT_TYPES,
        "message": {
            "owner": owner,
            "spender": spender,
            "value": value,
            "nonce": nonce,
            "deadline": deadline,
        },
    }


def sign_permit(private_key, message: dict) -> bytes:
    signed = Account.sign_typed_data(private_key, full_message=message)
    return bytes(signed.signature)


def recover_permit_signer(message: dict, signature: bytes) -> str:
    signable = encode_typed_data(full_message=message)
    return Account.recover_message(signable, signature=signature)

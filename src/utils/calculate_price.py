def mul_div(x: int, y: int, denominator: int, round_up: bool = False) -> int:
    # python ints are unbounded so x * y never overflows before the division
    product = x * y
    result = product // denominator
    if round_up and product % denominator != 0:
        result += 1
    return result


def rate_to_price_per_share(exchange_rate: int, asset_unit: int) -> float:
    return exchange_rate / asset_unit

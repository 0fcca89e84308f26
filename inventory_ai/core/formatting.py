def format_currency(amount) -> str:
    value = float(amount or 0)
    sign = "-" if value < 0 else ""
    return "{}${:,.2f}".format(sign, abs(value))


def format_promotion(fraction) -> str:
    value = float(fraction or 0)
    if value <= 0:
        return "None"
    return "{:g}%".format(round(value * 100, 2))

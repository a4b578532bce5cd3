def fmt_number(value):
    """ Dashboard-safe number formatter.
    - None -> 'N/A'
    - Int / float -> comma separated
    """
    if value is None:
        return "N/A"
    try:
        return f"{int(value):,}"
    except (ValueError, TypeError):
        return str(value)

def fmt_percent(value, decimals: int = 1):
    """ Dashboard-safe percent formatter.
    - None -> 'N/A'
    - Float already on the 0-100 scale -> fixed decimals and % sign
    """
    if value is None:
        return "N/A"
    try:
        return f"{float(value):.{decimals}f}%"
    except (ValueError, TypeError):
        return str(value)

from timesheets.exceptions import ValidationError


def format_duration(minutes):
    """90 -> '1h 30m'"""
    minutes = int(minutes or 0)
    return f"{minutes // 60}h {minutes % 60}m"


def minutes_between(start_time, end_time):
    """
    Minutes from HH:MM to HH:MM. An end before the start wraps past midnight.
    """
    try:
        start_h, start_m = (int(part) for part in start_time.split(':'))
        end_h, end_m = (int(part) for part in end_time.split(':'))
    except (AttributeError, ValueError):
        raise ValidationError("startTime and endTime must be HH:MM", details={
            'startTime': start_time, 'endTime': end_time,
        })
    duration = (end_h * 60 + end_m) - (start_h * 60 + start_m)
    if duration < 0:
        duration += 24 * 60
    return duration

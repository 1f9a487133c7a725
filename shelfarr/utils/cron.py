"""
Shelfarr v1.0.0 - Cron expressions
"""

from celery.schedules import ParseException, crontab

from ..exceptions import InvalidCronExpressionError


def parse_cron(expression: str, app=None) -> crontab:
    """
    Parse a 5-field cron expression ("minute hour day month weekday")

    Raises:
        InvalidCronExpressionError: wrong field count or invalid field values
    """
    fields = (expression or "").split()
    if len(fields) != 5:
        raise InvalidCronExpressionError(
            f"Cron expression must have 5 fields, got {len(fields)}: {expression!r}"
        )

    minute, hour, day_of_month, month_of_year, day_of_week = fields
    try:
        return crontab(
            minute=minute,
            hour=hour,
            day_of_month=day_of_month,
            month_of_year=month_of_year,
            day_of_week=day_of_week,
            app=app,
        )
    except (ValueError, ParseException) as e:
        raise InvalidCronExpressionError(f"Invalid cron expression {expression!r}: {e}")

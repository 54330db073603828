"""
CSV export of the attendance log
"""
import csv
import io

EXPORT_HEADER = ['Name', 'Date', 'Time']


def events_to_csv(events):
    """Name,Date,Time table, newest event first, in local time"""
    ordered = sorted(events, key=lambda e: e.timestamp, reverse=True)

    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator='\n')
    writer.writerow(EXPORT_HEADER)
    for event in ordered:
        local = event.timestamp.astimezone()
        writer.writerow([event.identity, local.strftime('%Y-%m-%d'), local.strftime('%H:%M:%S')])
    return buf.getvalue()

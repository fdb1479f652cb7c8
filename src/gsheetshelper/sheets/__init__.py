"""
Classes to facilitate working with Google Sheets
"""

# two letter column names can address up to 'ZZ'
GoogleSheetsMaxColumnIndex = 701
DEFAULT_DATE_PATTERN = "yyyy-mm-dd"

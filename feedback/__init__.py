"""Dynamic feedback collection backed by a spreadsheet store."""

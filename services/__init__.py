"""
Services package for DoseCare
Business rules that work on plain row dicts: dose schedules, adherence,
reports, vital signs, form validation, remote procedures and password reset
"""

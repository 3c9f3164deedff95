# donors/management/commands/import_donors.py
"""
Django management command to import donor data from CSV or Excel
Usage: python manage.py import_donors path/to/donors.xlsx [--default-password ...]

Each row goes through the same validation as API registration; rows that fail
are reported and skipped.
"""
from pathlib import Path

import pandas as pd
from django.core.management.base import BaseCommand, CommandError
from rest_framework.exceptions import APIException, ValidationError

from donors.utils import create_donor

DEFAULT_PASSWORD = 'ChangeMe123!'

# Accepted spreadsheet headers -> donor fields
COLUMN_ALIASES = {
    'full_name': 'name',
    'phone_number': 'phone',
    'blood_group': 'blood_type',
}

NUMERIC_FIELDS = {
    'age': lambda value: int(float(value)),
    'latitude': float,
    'longitude': float,
}


def read_donor_file(path):
    path = Path(path)
    if path.suffix.lower() in ('.xlsx', '.xls'):
        df = pd.read_excel(path, dtype=str)
    else:
        df = pd.read_csv(path, dtype=str)

    df.columns = [str(col).strip().lower() for col in df.columns]
    return df.rename(columns=COLUMN_ALIASES)


def row_to_donor_data(row, default_password):
    data = {}
    for field, value in row.items():
        if pd.isna(value):
            continue
        if isinstance(value, str):
            value = value.strip()
        data[field] = value

    # Unparseable numbers are left as text for the serializer to reject
    for field, cast in NUMERIC_FIELDS.items():
        if field in data:
            try:
                data[field] = cast(data[field])
            except (TypeError, ValueError):
                pass

    for field in ('gender', 'smoking', 'drinking'):
        if isinstance(data.get(field), str):
            data[field] = data[field].lower()

    data.setdefault('password', default_password)
    return data


def format_errors(detail):
    if isinstance(detail, dict):
        return '; '.join(f"{field}: {' '.join(str(m) for m in messages)}" for field, messages in detail.items())
    return str(detail)


class Command(BaseCommand):
    help = 'Import donors from a CSV or Excel file'

    def add_arguments(self, parser):
        parser.add_argument('donor_file', type=str, help='Path to the CSV or Excel file')
        parser.add_argument(
            '--default-password',
            default=DEFAULT_PASSWORD,
            help='Password for rows without a password column',
        )

    def handle(self, *args, **options):
        donor_file = options['donor_file']

        if not Path(donor_file).exists():
            raise CommandError(f'File not found: {donor_file}')

        self.stdout.write(self.style.WARNING(f'Starting import from {donor_file}...'))

        df = read_donor_file(donor_file)
        self.stdout.write(f'Found {len(df)} rows')

        imported_count = 0
        skipped_count = 0

        for index, row in df.iterrows():
            line = index + 2  # header is line 1
            data = row_to_donor_data(row, options['default_password'])

            try:
                donor = create_donor(data)
            except ValidationError as e:
                skipped_count += 1
                self.stdout.write(self.style.ERROR(f'✗ Row {line}: {format_errors(e.detail)}'))
                continue
            except APIException as e:
                skipped_count += 1
                self.stdout.write(self.style.ERROR(f'✗ Row {line}: {e.detail}'))
                continue

            imported_count += 1
            self.stdout.write(f'✓ Created: {donor.name} ({donor.blood_type}) - {donor.phone}')

        self.stdout.write(
            self.style.SUCCESS(
                f'\nImport complete!\n'
                f'Created: {imported_count}\n'
                f'Skipped: {skipped_count}'
            )
        )

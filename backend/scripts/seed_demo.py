"""CLI script to load a small demo data set into the registry database.
Usage: python scripts/seed_demo.py [--verify STUDENT_ID INSTITUTION_ID]
"""
import sys
import argparse
import pathlib
from typing import Optional, Tuple
# Ensure `backend/` is on sys.path so `registry` package imports work when running this script directly
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
from registry.config import settings
from registry.database import engine, create_db_and_tables
from registry.errors import RegistryError
from registry.services import RegistryService


def main(verify: Optional[Tuple[int, int]] = None):
    """Create one institution, one student and a credential linking them.

    With `verify`, only run a verification for the given
    (student_id, institution_id) pair. Results are printed to stdout.
    """
    create_db_and_tables(engine)
    registry = RegistryService(engine, id_start=settings.ID_START)
    if verify is not None:
        try:
            credential = registry.verify_credential(*verify)
        except RegistryError as e:
            print(f'{e.kind}: {e.message}')
            return 1
        print(f'Verified credential {credential.id}: {credential.degree} in {credential.course} ({credential.graduation_year})')
        return 0
    institution = registry.create_institution('MIT', 'Cambridge')
    print(f'Created institution {institution.id}: {institution.name}')
    student = registry.create_student('Alice', 'a@x.com')
    print(f'Created student {student.id}: {student.name}')
    credential = registry.create_credential(student.id, institution.id, 'CS101', 'BSc', 2024)
    print(f'Created credential {credential.id} issued_at={credential.issued_at}')
    print(f'Next id: {registry.peek_next_id()}')
    return 0

if __name__ == '__main__':
    parser = argparse.ArgumentParser()
    parser.add_argument('--verify', type=int, nargs=2, metavar=('STUDENT_ID', 'INSTITUTION_ID'), help='Verify a credential instead of seeding')
    args = parser.parse_args()
    sys.exit(main(verify=tuple(args.verify) if args.verify else None))

import subprocess
import sys


def run_migration(revision: str = "head"):
    """Bring the hostel database schema up to ``revision`` with Alembic"""
    try:
        result = subprocess.run(['alembic', 'upgrade', revision],
                                capture_output=True, text=True)
        if result.returncode == 0:
            print(f"✅ Database upgraded to {revision}")
            return True
        print(f"❌ Migration failed: {result.stderr}")
        return False
    except OSError as e:
        print(f"❌ Could not run alembic: {e}")
        return False


if __name__ == "__main__":
    target = sys.argv[1] if len(sys.argv) > 1 else "head"
    sys.exit(0 if run_migration(target) else 1)

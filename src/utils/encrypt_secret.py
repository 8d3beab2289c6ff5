# Hilfsskript zum Verschlüsseln von Secrets für .env (z. B. GOOGLE_PRIVATE_KEY_ENC)
# Ausführen: python encrypt_secret.py <klartext>  oder  python encrypt_secret.py --file key.pem
import getpass
import sys
from pathlib import Path

from cryptography.fernet import Fernet
from rich import print

from shared_modules.config import Config


def encrypt_value(value: str, fernet_key: str) -> str:
    """
    Verschlüsselt value mit dem Fernet-Key; Gegenstück zu Config.get_decrypted_secret.
    """
    return Fernet(fernet_key.encode()).encrypt(value.encode()).decode()


def _read_secret(argv: list) -> str:
    if len(argv) == 3 and argv[1] == "--file":
        # Mehrzeilige Schlüssel (PEM) direkt aus der Datei
        return Path(argv[2]).read_text(encoding="utf-8")
    if len(argv) == 2:
        return argv[1]
    print("Kein Secret als Argument übergeben.")
    return getpass.getpass("Bitte Secret eingeben (wird nicht angezeigt): ")


def main():
    secret = _read_secret(sys.argv)
    if not secret:
        print("[red]Kein Secret eingegeben. Abbruch.[/red]")
        sys.exit(1)

    config = Config()
    fernet_key = config.get_secret("FERNET_KEY")
    if not fernet_key:
        fernet_key = Fernet.generate_key().decode()
        print("\nKein FERNET_KEY in der Umgebung gefunden. Neuer Schlüssel:")
        print(f"FERNET_KEY={fernet_key}")
        print("Bitte in der .env eintragen und das Skript erneut ausführen.\n")
        sys.exit(1)

    print(f"Verschlüsselter Wert für .env: {encrypt_value(secret, fernet_key)}")


if __name__ == "__main__":
    main()

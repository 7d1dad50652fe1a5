# send_test_email.py
import sys

from clima.core.config import get_settings
from clima.core.email_client import OutgoingEmail, build_mailer


def main():
    if len(sys.argv) != 2:
        print("usage: python send_test_email.py you@example.com")
        sys.exit(2)

    mailer = build_mailer(get_settings())
    print(f"Sending test email with {type(mailer).__name__}...")

    mailer.send(
        OutgoingEmail(
            to_email=sys.argv[1],
            subject="[Clima] Test Email",
            text_body="This is a plain text test email from the Clima backend.",
            html_body="<h1>HTML Test Email</h1><p>This is a <b>test</b> email.</p>",
        )
    )

    print("If no errors: email sent! Check your inbox.")

if __name__ == "__main__":
    main()

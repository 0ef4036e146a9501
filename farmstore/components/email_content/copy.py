"""
Copy catalog for newsletter emails and outcome messages.

One entry per supported language. Placeholders use str.format syntax.
"""

from __future__ import annotations

SITE_NAME = "Kmetija Maroša"

EMAIL_COPY: dict[str, dict[str, str]] = {
    "sl": {
        "greeting_named": "Pozdravljeni, {name}!",
        "greeting": "Pozdravljeni!",
        "confirm_subject": "Potrdite prijavo na e-novice Kmetije Maroša",
        "confirm_intro": "Hvala, da ste se prijavili na e-novice Kmetije Maroša.",
        "confirm_action_html": (
            "Za dokončanje prijave in potrditev vašega e-poštnega naslova, "
            "prosimo kliknite na spodnji gumb:"
        ),
        "confirm_action_text": (
            "Za dokončanje prijave in potrditev vašega e-poštnega naslova, "
            "prosimo kliknite na spodnjo povezavo:"
        ),
        "confirm_button": "Potrdite naročnino",
        "confirm_ignore": "Če niste zahtevali te prijave, lahko to sporočilo preprosto ignorirate.",
        "welcome_subject": "Dobrodošli v družini Kmetije Maroša!",
        "welcome_thanks": "Hvala, da ste potrdili prijavo na naše e-novice.",
        "welcome_topics_intro": "Veseli nas, da ste se nam pridružili. Redno vas bomo obveščali o:",
        "welcome_topics": (
            "Novih ekoloških izdelkih|Sezonskih ponudbah in popustih|"
            "Receptih in nasvetih za zdravo prehrano|Dogodkih na naši kmetiji"
        ),
        "offer_title": "Posebna ponudba za vas",
        "offer_body": "Kot dobrodošlico vam podarjamo {offer} na vaš prvi nakup.",
        "offer_percent": "{percent}% popust",
        "offer_generic": "popust",
        "offer_code": "Uporabite kodo:",
        "visit_site": "Obiščite našo spletno stran",
        "welcome_outro": "Veselimo se, da vam bomo lahko predstavili naše ekološke izdelke.",
        "unsubscribe": "Odjava od e-novic",
        "signoff": "Lep pozdrav,",
        "team": "Ekipa Kmetije Maroša",
        "rights": "Vse pravice pridržane.",
    },
    "en": {
        "greeting_named": "Hello, {name}!",
        "greeting": "Hello!",
        "confirm_subject": "Confirm Your Subscription to Kmetija Maroša Newsletter",
        "confirm_intro": "Thank you for subscribing to Kmetija Maroša's newsletter.",
        "confirm_action_html": (
            "To complete your subscription and confirm your email address, "
            "please click the button below:"
        ),
        "confirm_action_text": (
            "To complete your subscription and confirm your email address, "
            "please click the link below:"
        ),
        "confirm_button": "Confirm Subscription",
        "confirm_ignore": (
            "If you did not request this subscription, you can simply ignore this message."
        ),
        "welcome_subject": "Welcome to the Kmetija Maroša Family!",
        "welcome_thanks": "Thank you for confirming your subscription to our newsletter.",
        "welcome_topics_intro": (
            "We're delighted to have you join us. We'll keep you regularly updated about:"
        ),
        "welcome_topics": (
            "New organic products|Seasonal offers and discounts|"
            "Recipes and healthy eating tips|Events at our farm"
        ),
        "offer_title": "Special Offer for You",
        "offer_body": "As a welcome gift, we're giving you a {offer} on your first purchase.",
        "offer_percent": "{percent}% discount",
        "offer_generic": "discount",
        "offer_code": "Use code:",
        "visit_site": "Visit our website",
        "welcome_outro": "We look forward to sharing our organic products with you.",
        "unsubscribe": "Unsubscribe from newsletter",
        "signoff": "Best regards,",
        "team": "The Kmetija Maroša Team",
        "rights": "All rights reserved.",
    },
    "de": {
        "greeting_named": "Hallo, {name}!",
        "greeting": "Hallo!",
        "confirm_subject": "Bestätigen Sie Ihr Abonnement des Kmetija Maroša Newsletters",
        "confirm_intro": "Vielen Dank für Ihr Abonnement des Newsletters von Kmetija Maroša.",
        "confirm_action_html": (
            "Um Ihr Abonnement abzuschließen und Ihre E-Mail-Adresse zu bestätigen, "
            "klicken Sie bitte auf die Schaltfläche unten:"
        ),
        "confirm_action_text": (
            "Um Ihr Abonnement abzuschließen und Ihre E-Mail-Adresse zu bestätigen, "
            "klicken Sie bitte auf den Link unten:"
        ),
        "confirm_button": "Abonnement bestätigen",
        "confirm_ignore": (
            "Wenn Sie dieses Abonnement nicht angefordert haben, "
            "können Sie diese Nachricht einfach ignorieren."
        ),
        "welcome_subject": "Willkommen in der Kmetija Maroša Familie!",
        "welcome_thanks": "Vielen Dank für die Bestätigung Ihres Newsletter-Abonnements.",
        "welcome_topics_intro": (
            "Wir freuen uns, dass Sie sich uns angeschlossen haben. "
            "Wir werden Sie regelmäßig über Folgendes informieren:"
        ),
        "welcome_topics": (
            "Neue Bio-Produkte|Saisonale Angebote und Rabatte|"
            "Rezepte und Tipps für gesunde Ernährung|Veranstaltungen auf unserem Bauernhof"
        ),
        "offer_title": "Spezielles Angebot für Sie",
        "offer_body": "Als Willkommensgeschenk geben wir Ihnen einen {offer} auf Ihren ersten Einkauf.",
        "offer_percent": "{percent}% Rabatt",
        "offer_generic": "Rabatt",
        "offer_code": "Verwenden Sie den Code:",
        "visit_site": "Besuchen Sie unsere Website",
        "welcome_outro": "Wir freuen uns darauf, Ihnen unsere Bio-Produkte vorzustellen.",
        "unsubscribe": "Newsletter abbestellen",
        "signoff": "Mit freundlichen Grüßen,",
        "team": "Das Kmetija Maroša Team",
        "rights": "Alle Rechte vorbehalten.",
    },
    "hr": {
        "greeting_named": "Pozdrav, {name}!",
        "greeting": "Pozdrav!",
        "confirm_subject": "Potvrdite pretplatu na bilten Kmetije Maroša",
        "confirm_intro": "Hvala što ste se pretplatili na bilten Kmetije Maroša.",
        "confirm_action_html": (
            "Da biste dovršili pretplatu i potvrdili svoju adresu e-pošte, "
            "kliknite gumb u nastavku:"
        ),
        "confirm_action_text": (
            "Da biste dovršili pretplatu i potvrdili svoju adresu e-pošte, "
            "kliknite vezu u nastavku:"
        ),
        "confirm_button": "Potvrdi pretplatu",
        "confirm_ignore": "Ako niste zatražili ovu pretplatu, možete jednostavno zanemariti ovu poruku.",
        "welcome_subject": "Dobrodošli u obitelj Kmetije Maroša!",
        "welcome_thanks": "Hvala što ste potvrdili pretplatu na naš bilten.",
        "welcome_topics_intro": (
            "Drago nam je što ste nam se pridružili. Redovito ćemo vas obavještavati o:"
        ),
        "welcome_topics": (
            "Novim organskim proizvodima|Sezonskim ponudama i popustima|"
            "Receptima i savjetima za zdravu prehranu|Događanjima na našoj farmi"
        ),
        "offer_title": "Posebna ponuda za vas",
        "offer_body": "Kao dobrodošlicu, dajemo vam {offer} na vašu prvu kupnju.",
        "offer_percent": "{percent}% popusta",
        "offer_generic": "popust",
        "offer_code": "Koristite kod:",
        "visit_site": "Posjetite našu web stranicu",
        "welcome_outro": "Radujemo se što ćemo s vama podijeliti naše organske proizvode.",
        "unsubscribe": "Odjava od biltena",
        "signoff": "Srdačan pozdrav,",
        "team": "Tim Kmetije Maroša",
        "rights": "Sva prava pridržana.",
    },
}

# User-visible outcome messages for newsletter operations.
RESULT_MESSAGES: dict[str, dict[str, str]] = {
    "sl": {
        "subscribed": "Prijava je ustvarjena. Prosimo, preverite e-pošto in potrdite prijavo.",
        "subscribed_simulated": "Razvojni način: e-pošta bi bila poslana v produkciji.",
        "already_subscribed": "Ta e-poštni naslov je že prijavljen na naše e-novice.",
        "invalid_email": "Neveljaven e-poštni naslov.",
        "subscription_failed": "Prijave ni bilo mogoče ustvariti.",
        "confirmed": "Vaša prijava je potrjena.",
        "already_confirmed": "Vaša prijava je že potrjena.",
        "confirm_failed": "Prijave ni bilo mogoče potrditi.",
        "invalid_token": "Neveljavna ali potekla povezava.",
        "unsubscribed": "Uspešno ste se odjavili od naših e-novic.",
        "already_unsubscribed": "Od naših e-novic ste že odjavljeni.",
        "unsubscribe_failed": "Odjave ni bilo mogoče izvesti.",
        "preferences_updated": "Vaše nastavitve so bile uspešno posodobljene.",
        "preferences_failed": "Nastavitev ni bilo mogoče posodobiti.",
    },
    "en": {
        "subscribed": "Subscription created. Please check your email to confirm your subscription.",
        "subscribed_simulated": "Development mode: email would be sent in production.",
        "already_subscribed": "This email is already subscribed to our newsletter.",
        "invalid_email": "Invalid email address.",
        "subscription_failed": "Failed to create subscription.",
        "confirmed": "Your subscription has been confirmed.",
        "already_confirmed": "Your subscription is already confirmed.",
        "confirm_failed": "Failed to confirm subscription.",
        "invalid_token": "Invalid or expired link.",
        "unsubscribed": "You have been successfully unsubscribed from our newsletter.",
        "already_unsubscribed": "You are already unsubscribed from our newsletter.",
        "unsubscribe_failed": "Failed to unsubscribe from newsletter.",
        "preferences_updated": "Your preferences have been updated successfully.",
        "preferences_failed": "Failed to update preferences.",
    },
    "de": {
        "subscribed": "Abonnement erstellt. Bitte prüfen Sie Ihre E-Mail, um es zu bestätigen.",
        "subscribed_simulated": "Entwicklungsmodus: Die E-Mail würde in der Produktion gesendet.",
        "already_subscribed": "Diese E-Mail-Adresse ist bereits für unseren Newsletter angemeldet.",
        "invalid_email": "Ungültige E-Mail-Adresse.",
        "subscription_failed": "Das Abonnement konnte nicht erstellt werden.",
        "confirmed": "Ihr Abonnement wurde bestätigt.",
        "already_confirmed": "Ihr Abonnement ist bereits bestätigt.",
        "confirm_failed": "Das Abonnement konnte nicht bestätigt werden.",
        "invalid_token": "Ungültiger oder abgelaufener Link.",
        "unsubscribed": "Sie haben unseren Newsletter erfolgreich abbestellt.",
        "already_unsubscribed": "Sie haben unseren Newsletter bereits abbestellt.",
        "unsubscribe_failed": "Die Abmeldung konnte nicht durchgeführt werden.",
        "preferences_updated": "Ihre Einstellungen wurden erfolgreich aktualisiert.",
        "preferences_failed": "Die Einstellungen konnten nicht aktualisiert werden.",
    },
    "hr": {
        "subscribed": "Pretplata je stvorena. Provjerite e-poštu kako biste potvrdili pretplatu.",
        "subscribed_simulated": "Razvojni način: e-pošta bi bila poslana u produkciji.",
        "already_subscribed": "Ova adresa e-pošte već je pretplaćena na naš bilten.",
        "invalid_email": "Nevažeća adresa e-pošte.",
        "subscription_failed": "Pretplatu nije bilo moguće stvoriti.",
        "confirmed": "Vaša pretplata je potvrđena.",
        "already_confirmed": "Vaša pretplata je već potvrđena.",
        "confirm_failed": "Pretplatu nije bilo moguće potvrditi.",
        "invalid_token": "Nevažeća ili istekla poveznica.",
        "unsubscribed": "Uspješno ste se odjavili s našeg biltena.",
        "already_unsubscribed": "Već ste odjavljeni s našeg biltena.",
        "unsubscribe_failed": "Odjavu nije bilo moguće provesti.",
        "preferences_updated": "Vaše postavke su uspješno ažurirane.",
        "preferences_failed": "Postavke nije bilo moguće ažurirati.",
    },
}

"""
Internationalization (i18n) module for the domain binder.

Provides translations for all user-facing messages in German (de) and English (en).
"""

from typing import Optional

from .enums import WorkflowState


# Supported languages
SUPPORTED_LANGUAGES = frozenset({"de", "en"})
DEFAULT_LANGUAGE = "en"


# Translation dictionary with all messages
# Structure: {message_key: {language_code: translated_message}}
TRANSLATIONS: dict[str, dict[str, str]] = {
    # Usage
    "cli.usage": {
        "de": "Verwendung: {prog} <webapp_name> <resource_group> <github_repo_url> <custom_domain> [Optionen]",
        "en": "Usage: {prog} <webapp_name> <resource_group> <github_repo_url> <custom_domain> [options]",
    },
    "cli.example": {
        "de": "Beispiel: {prog} mystaticsite myresourcegroup https://github.com/username/repo www.example.com",
        "en": "Example: {prog} mystaticsite myresourcegroup https://github.com/username/repo www.example.com",
    },
    "cli.env_header": {
        "de": "Benötigte Umgebungsvariablen:",
        "en": "Environment variables required:",
    },
    "cli.env_githubpat": {
        "de": "  GITHUBPAT - GitHub Personal Access Token",
        "en": "  GITHUBPAT - GitHub Personal Access Token",
    },
    "cli.env_cloudflare": {
        "de": "  CLOUDFLARE_API_TOKEN - Cloudflare API-Token (--dns cloudflare)",
        "en": "  CLOUDFLARE_API_TOKEN - Cloudflare API Token (--dns cloudflare)",
    },
    "cli.env_godaddy": {
        "de": "  GODADDY_API_KEY, GODADDY_API_SECRET - GoDaddy API-Schlüssel (--dns godaddy)",
        "en": "  GODADDY_API_KEY, GODADDY_API_SECRET - GoDaddy API key pair (--dns godaddy)",
    },
    "cli.options_header": {
        "de": "Optionen:",
        "en": "Options:",
    },
    "cli.missing_arguments": {
        "de": "Fehler: Erforderliche Argumente fehlen.",
        "en": "Error: Missing required arguments.",
    },
    "cli.config_load_failed": {
        "de": "Konfiguration konnte nicht geladen werden: {path}",
        "en": "Failed to load configuration: {path}",
    },
    "cli.config_saved": {
        "de": "Konfiguration gespeichert unter: {path}",
        "en": "Configuration saved to: {path}",
    },
    "cli.config_save_failed": {
        "de": "Konfiguration konnte nicht gespeichert werden: {path}",
        "en": "Failed to save configuration: {path}",
    },
    "cli.title": {
        "de": "==== Azure Static Web App mit {provider} Custom Domain Einrichtung ====",
        "en": "==== Azure Static Web App with {provider} Custom Domain Setup ====",
    },
    "cli.simulation_mode": {
        "de": "[SIMULATIONSMODUS] Es werden keine externen Aufrufe ausgeführt",
        "en": "[SIMULATION MODE] No external calls are made",
    },
    "cli.wait_prompt": {
        "de": "DNS-Einträge brauchen Zeit zur Verbreitung. Vor dem Fortfahren 10 Minuten warten? (y/n): ",
        "en": "DNS entries need time to propagate. Do you want to wait 10 minutes before continuing? (y/n): ",
    },
    "cli.interrupted": {
        "de": "Abgebrochen.",
        "en": "Interrupted.",
    },

    # Prerequisites
    "prereq.checking": {
        "de": "Voraussetzungen werden geprüft...",
        "en": "Checking prerequisites...",
    },
    "prereq.completed": {
        "de": "Prüfung der Voraussetzungen abgeschlossen.",
        "en": "Prerequisites check completed.",
    },
    "prereq.az_missing": {
        "de": "Azure CLI nicht gefunden. Installation: https://docs.microsoft.com/en-us/cli/azure/install-azure-cli",
        "en": "Azure CLI not found. Please install it: https://docs.microsoft.com/en-us/cli/azure/install-azure-cli",
    },
    "prereq.missing_credential": {
        "de": "Fehlende Konfiguration: Umgebungsvariable {name} ist nicht gesetzt",
        "en": "Missing required configuration: environment variable {name} is not set",
    },
    "prereq.empty_argument": {
        "de": "Argument {name} darf nicht leer sein",
        "en": "Argument {name} must not be empty",
    },
    "prereq.not_https": {
        "de": "Repository-URL {url} verwendet kein https",
        "en": "Repository URL {url} does not use https",
    },
    "prereq.apex_ambiguous": {
        "de": "{domain} wird als Apex-Domain behandelt (kein www.-Präfix)",
        "en": "{domain} is treated as an apex domain (no www. prefix)",
    },

    # Workflow steps
    "step.resource_provisioned": {
        "de": "Static Web App bereit: {hostname}",
        "en": "Static Web App ready: {hostname}",
    },
    "step.validation_requested": {
        "de": "Domain-Validierung angefordert",
        "en": "Domain validation requested",
    },
    "step.token_obtained": {
        "de": "Validierungstoken erhalten",
        "en": "Validation token obtained",
    },
    "step.txt_record_written": {
        "de": "TXT-Eintrag erstellt: {name}",
        "en": "TXT record added: {name}",
    },
    "step.routing_record_written": {
        "de": "{type}-Eintrag erstellt: {name}",
        "en": "{type} record added: {name}",
    },
    "step.awaiting_propagation": {
        "de": "Warte {minutes} Minuten auf DNS-Verbreitung...",
        "en": "Waiting {minutes} minutes for DNS propagation...",
    },
    "step.skip_propagation": {
        "de": "Fortfahren ohne auf die DNS-Verbreitung zu warten",
        "en": "Continuing without waiting for DNS propagation",
    },
    "step.attached": {
        "de": "Custom Domain erfolgreich zur Static Web App hinzugefügt.",
        "en": "Custom domain added successfully to the Static Web App.",
    },

    # Remediation per failed step
    "remediation.created": {
        "de": "Prüfen Sie Azure-Anmeldung, Ressourcengruppe und GITHUBPAT und versuchen Sie es erneut.",
        "en": "Check the Azure login, the resource group and GITHUBPAT, then retry.",
    },
    "remediation.resource_provisioned": {
        "de": "Die Domain-Validierung konnte nicht angefordert werden. Prüfen Sie die Domain und versuchen Sie es erneut.",
        "en": "Domain validation could not be requested. Check the domain and retry.",
    },
    "remediation.validation_requested": {
        "de": "Das Validierungstoken ist nicht verfügbar. Sie müssen das Token eventuell im Azure-Portal ansehen und die DNS-Einträge manuell anlegen.",
        "en": "The validation token is not available. You may need to view the token in the Azure Portal and add the DNS records manually.",
    },
    "remediation.token_obtained": {
        "de": "Der TXT-Eintrag konnte nicht angelegt werden. Prüfen Sie die DNS-Zugangsdaten und ob die Zone existiert.",
        "en": "The TXT record could not be added. Check the DNS credentials and that the zone exists.",
    },
    "remediation.txt_record_written": {
        "de": "Der Routing-Eintrag konnte nicht angelegt werden. Der TXT-Eintrag bleibt bestehen; legen Sie den Routing-Eintrag manuell an.",
        "en": "The routing record could not be added. The TXT record stays in place; add the routing record manually.",
    },
    "remediation.cancelled": {
        "de": "Der Ablauf wurde abgebrochen. Bereits angelegte DNS-Einträge bleiben bestehen.",
        "en": "The run was cancelled. DNS records that were already added stay in place.",
    },
    "remediation.awaiting_propagation": {
        "de": "Das kann an der Verzögerung der DNS-Verbreitung liegen. Versuchen Sie es später erneut.",
        "en": "This could be due to DNS propagation delay. You may need to retry later.",
    },

    # Final output
    "result.success": {
        "de": "Einrichtung erfolgreich abgeschlossen!",
        "en": "Setup completed successfully!",
    },
    "result.url": {
        "de": "Ihre Static Web App sollte nun erreichbar sein unter: https://{domain}",
        "en": "Your Static Web App should now be accessible at: https://{domain}",
    },
    "result.ssl_note": {
        "de": "Hinweis: Die Bereitstellung des SSL-Zertifikats kann einige Minuten dauern.",
        "en": "Note: It may take a few minutes for the SSL certificate to be provisioned.",
    },
    "result.propagation_note": {
        "de": "Hinweis: Die DNS-Verbreitung kann einige Zeit dauern (typischerweise 30 Minuten bis einige Stunden).",
        "en": "Note: DNS propagation may take some time (typically 30 mins to a few hours).",
    },
    "result.failed": {
        "de": "Einrichtung fehlgeschlagen nach Schritt '{step}': {message}",
        "en": "Setup failed after step '{step}': {message}",
    },
    "result.response": {
        "de": "Antwort: {response}",
        "en": "Response: {response}",
    },
}


def get_message(
    key: str,
    language: Optional[str] = None,
    **kwargs,
) -> str:
    """
    Get a translated message by key.

    Args:
        key: The message key (e.g., 'result.success')
        language: Language code ('de' or 'en'). Defaults to DEFAULT_LANGUAGE.
        **kwargs: Format arguments for the message template

    Returns:
        The translated and formatted message string.
        If the key is not found, returns the key itself.

    Examples:
        >>> get_message('result.success', 'en')
        'Setup completed successfully!'
        >>> get_message('result.url', 'en', domain='www.example.com')
        'Your Static Web App should now be accessible at: https://www.example.com'
    """
    if language is None or language not in SUPPORTED_LANGUAGES:
        language = DEFAULT_LANGUAGE

    translations = TRANSLATIONS.get(key)
    if translations is None:
        return key

    message = translations.get(language) or translations.get(DEFAULT_LANGUAGE)
    if message is None:
        return key

    if kwargs:
        try:
            message = message.format(**kwargs)
        except KeyError:
            pass

    return message


def remediation_for(failed_step: WorkflowState, language: Optional[str] = None) -> Optional[str]:
    """
    Remediation hint for a run that failed after the given state.

    Returns:
        Translated hint, or None if the step has none
    """
    key = f"remediation.{failed_step.value}"
    if key not in TRANSLATIONS:
        return None
    return get_message(key, language)


def get_all_message_keys() -> set[str]:
    return set(TRANSLATIONS.keys())


def has_translation(key: str, language: str) -> bool:
    translations = TRANSLATIONS.get(key)
    if translations is None:
        return False
    return language in translations


def get_missing_translations(language: str) -> set[str]:
    """
    Get all message keys that are missing translations for a language.
    """
    missing = set()
    for key, translations in TRANSLATIONS.items():
        if language not in translations:
            missing.add(key)
    return missing


def validate_translations() -> dict[str, set[str]]:
    """
    Validate that all languages have all translations.

    Returns:
        Dictionary mapping language codes to sets of missing message keys.
        Empty sets indicate complete translations.
    """
    return {language: get_missing_translations(language) for language in SUPPORTED_LANGUAGES}

"""
WhatsApp Message Templates and Constants

This module contains template definitions for WhatsApp messages sent by the
alert engine: rate alert notifications (French, as shown to requesters) and
the daily rate update reminder sent to exchange offices.
"""

# Rate alert: one named office offers the awaited rate
OFFICE_ALERT_TEMPLATE = """🔔 Alerte ExchanGo24 : Votre taux cible est disponible !

Le taux que vous attendiez est maintenant proposé par un bureau de change dans votre zone sélectionnée :

💱 1 {base_currency} = {rate} {target_currency}
📍 Bureau : {office_name}

⚠️ Ce taux peut rapidement évoluer, ne tardez pas à en profiter !

👉 [Voir le bureau maintenant]

ExchanGo24, trouvez le meilleur taux facilement."""

# Rate alert: several offices of the alert scope, none identified
MULTIPLE_OFFICES_ALERT_TEMPLATE = """🔔 Alerte ExchanGo24 : Plusieurs bureaux atteignent votre taux cible !

Bonne nouvelle ! Plusieurs bureaux de change proposent actuellement votre taux recherché dans votre zone :

💱 1 {base_currency} = {rate} {target_currency}
📍 Nombre de bureaux : {office_count}

⚠️ Ces taux peuvent changer rapidement, profitez-en vite !

👉 [Comparer les bureaux]

ExchanGo24, trouvez toujours le meilleur taux en un clic."""

# Rate alert: city zone
CITY_ALERT_TEMPLATE = """🔔 Alerte ExchanGo24 : Votre taux cible est disponible !

Le taux que vous attendiez est maintenant proposé par un bureau de change dans votre zone sélectionnée :

💱 1 {base_currency} = {rate} {target_currency}
📍 Zone : {city_names}

⚠️ Ce taux peut rapidement évoluer, ne tardez pas à en profiter !

👉 [Voir les bureaux disponibles]

ExchanGo24, trouvez le meilleur taux facilement."""

# Rate alert: no office or city context
GENERIC_ALERT_TEMPLATE = """🔔 Alerte ExchanGo24 : Votre taux cible est disponible !

Le taux que vous attendiez est maintenant disponible :

💱 1 {base_currency} = {rate} {target_currency}

⚠️ Ce taux peut rapidement évoluer, ne tardez pas à en profiter !

ExchanGo24, trouvez le meilleur taux facilement."""

# Daily reminder for offices without recent rate updates
RATE_UPDATE_REMINDER_TEMPLATE = """🔔 *Rate Update Reminder*

Hello,

Your exchange office "*{office_name}*" hasn't updated its exchange rates in the last {stale_hours} hours.

To keep your rates competitive and attract more customers, please update your rates regularly.

Update your rates now: https://exchango24.com/dashboard/rates

Thank you for using ExchanGo24! 🚀

---
*ExchanGo24 Team*"""

"""Language Strings — centralized Ukrainian text shown to chat users.

Invariants:
    - All strings are pure data (no IO, no computation beyond formatting)
    - Every user-visible outcome of the dispatcher, interpreter and reconciler lives here
    - Templates use str.format placeholders; callers pass keyword arguments only

Design Decisions:
    - Single locale (uk): the bot's operators all write Ukrainian; the system prompt
      pins the model to Ukrainian too, so fallback texts match narrated texts
"""

# --- Interpreter / reconciler fallbacks ---------------------------------------

INTERPRET_FALLBACK = "Помилка при обробці запиту. Спробуйте пізніше."
RECONCILE_EXTRA_CALL = (
    "Оновлено, але для наступної дії надішліть, будь ласка, нове повідомлення."
)

# --- Dispatcher outcomes ------------------------------------------------------

UNKNOWN_OPERATION = "Невідома команда, спробуйте ще раз."
GENERIC_FAILURE = "Сталася помилка при виконанні команди. Спробуйте пізніше."
MISSING_ARGUMENT = "Не вистачає параметра '{field}' для команди {operation}."
INVALID_ARGUMENT = "Недійсне значення параметра '{field}': {value}."
INVALID_REQUEST = "Некоректний запит: перевірте поля {fields}."

INVALID_TIME = 'Недійсний формат часу: {value}. Використовуйте формат "ГГ:00".'
TASK_NOT_FOUND = "Завдання з ID {task_id} не знайдено."
CALLER_NOT_FOUND = "Користувача не знайдено."
TASK_NOT_PERMITTED = (
    "Вибачте, але у вас немає права модифікувати це завдання. "
    "Ця функція доступна лише для адміністраторів або призначених користувачів."
)
TIME_UPDATED = {
    "checkin": "Час заїзду оновлено на {time}.",
    "checkout": "Час виїзду оновлено на {time}.",
}

NOTHING_TO_UPDATE = "Не вказано ні суму, ні кількість ключів для оновлення."
INVALID_NUMBER = "Недійсне число для поля '{field}': {value}."
INFO_UPDATED_PREFIX = "Оновлено: "
INFO_SUM_PART = "сума до оплати - {value} грн"
INFO_KEYS_PART = "кількість ключів - {value}"

ASSIGNMENTS_ADMIN_ONLY = (
    "Тільки адміністратори можуть керувати призначеннями квартир."
)
SHOW_APARTMENTS_ADMIN_ONLY = "Тільки адміністратор може дивитись чужі квартири."
USER_NOT_FOUND = "Не знайшов користувача за запитом '{query}'."
ASSIGNMENT_UPDATED = {
    "add": "Успішно додано квартири {apartments} до користувача {user}.",
    "remove": "Успішно видалено квартири {apartments} у користувача {user}.",
}
NO_APARTMENTS = "У користувача {user} немає призначених квартир."
USER_APARTMENTS = "У користувача {user} призначені квартири: {apartments}"


def time_updated(change_type: str, time: str) -> str:
    return TIME_UPDATED[change_type].format(time=time)


def assignment_updated(action: str, apartment_ids: list[str], user: str) -> str:
    return ASSIGNMENT_UPDATED[action].format(
        apartments=", ".join(apartment_ids), user=user,
    )

"""Starter deck inserted into an empty store.

(hr, en, category) の三つ組。ID と記憶状態は投入時に生成する。
"""

from __future__ import annotations

SEED_PHRASES: list[tuple[str, str, str]] = [
    ("Bok!", "Hi!", "Greetings"),
    ("Dobar dan", "Good day", "Greetings"),
    ("Dobro jutro", "Good morning", "Greetings"),
    ("Dobra večer", "Good evening", "Greetings"),
    ("Laku noć", "Good night", "Greetings"),
    ("Hvala", "Thank you", "Politeness"),
    ("Molim", "Please/You're welcome", "Politeness"),
    ("Oprostite", "Excuse me / Sorry", "Politeness"),
    ("Kako si?", "How are you? (informal)", "Greetings"),
    ("Kako ste?", "How are you? (formal)", "Greetings"),
    ("Dobro sam", "I'm well", "Small Talk"),
    ("Ne razumijem", "I don't understand", "Basics"),
    ("Govorite li engleski?", "Do you speak English?", "Basics"),
    ("Možete li govoriti sporije?", "Can you speak more slowly?", "Basics"),
    ("Kako se zoveš?", "What's your name?", "Small Talk"),
    ("Zovem se...", "My name is...", "Small Talk"),
    ("Drago mi je", "Nice to meet you", "Small Talk"),
    ("Gdje je...", "Where is...", "Travel"),
    ("Koliko košta?", "How much is it?", "Shopping"),
    ("To je preskupo", "That's too expensive", "Shopping"),
    ("Može popust?", "Can I get a discount?", "Shopping"),
    ("Račun, molim", "The bill, please", "Food & Drink"),
    ("Voda bez plina", "Still water", "Food & Drink"),
    ("Voda s plinom", "Sparkling water", "Food & Drink"),
    ("Bez mlijeka", "Without milk", "Food & Drink"),
    ("Gdje je WC?", "Where is the bathroom?", "Travel"),
    ("Ulaznica", "Ticket", "Travel"),
    ("Autobus", "Bus", "Travel"),
    ("Lijevo / Desno", "Left / Right", "Travel"),
    ("Pomoć!", "Help!", "Emergency"),
    ("Zovite policiju!", "Call the police!", "Emergency"),
    ("Trebam liječnika", "I need a doctor", "Emergency"),
    ("Alergična sam na...", "I'm allergic to...", "Emergency"),
    ("Jedna karta za...", "One ticket to...", "Travel"),
    ("Koliko je sati?", "What time is it?", "Basics"),
    ("Može račun?", "Can I get the check?", "Food & Drink"),
    ("Gdje je trajekt?", "Where is the ferry?", "Travel"),
    ("Plaža", "Beach", "Travel"),
    ("Luka", "Port/Harbor", "Travel"),
    ("Koliko daleko?", "How far?", "Travel"),
]

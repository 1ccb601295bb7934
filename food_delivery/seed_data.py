from decimal import Decimal

_PIZZA_IMAGE = "https://images.unsplash.com/photo-1560750133-aafd1707f646?w=400"
_BURGER_IMAGE = "https://images.unsplash.com/photo-1607013401178-f9c15ab575bb?w=400"
_CHINESE_IMAGE = "https://images.unsplash.com/photo-1625937751876-4515cd8e78bd?w=400"
_ABACHA_IMAGE = "https://images.unsplash.com/photo-1621996346565-e3dbc646d9a9?w=400"
_SHARATON_IMAGE = "https://images.unsplash.com/photo-1623428187969-5da2dcea5ebf?w=400"
_SUYA_IMAGE = "https://images.unsplash.com/photo-1600891964599-f61ba0e24092?w=400"

SAMPLE_RESTAURANTS = [
    {"id": "1", "name": "Pizza Palace", "cuisine": "Italian, Pizza", "rating": Decimal("4.5"), "delivery_time": "25-35 min", "image": _PIZZA_IMAGE},
    {"id": "2", "name": "Burger Hut", "cuisine": "Mixed Burger, Salads", "rating": Decimal("4.7"), "delivery_time": "20-30 min", "image": _BURGER_IMAGE},
    {"id": "3", "name": "Chinese Food", "cuisine": "China", "rating": Decimal("4.8"), "delivery_time": "30-40 min", "image": _CHINESE_IMAGE},
    {"id": "4", "name": "Abacha Joint", "cuisine": "Local Igbo Food", "rating": Decimal("4.6"), "delivery_time": "25-35 min", "image": _ABACHA_IMAGE},
    {"id": "5", "name": "Open sharaton", "cuisine": "Local Nigerian Food", "rating": Decimal("4.4"), "delivery_time": "15-25 min", "image": _SHARATON_IMAGE},
    {"id": "6", "name": "Suya World", "cuisine": "International, Mixed", "rating": Decimal("4.3"), "delivery_time": "30-45 min", "image": _SUYA_IMAGE},
]

SAMPLE_MENU_ITEMS = [
    {"id": "m1", "restaurant_id": "1", "name": "Margherita Pizza", "description": "Classic tomato sauce, mozzarella, and basil", "price": Decimal("12.99"), "image": _PIZZA_IMAGE},
    {"id": "m2", "restaurant_id": "1", "name": "Pepperoni Deluxe", "description": "Double pepperoni, extra cheese, and oregano", "price": Decimal("15.99"), "image": _PIZZA_IMAGE},
    {"id": "m3", "restaurant_id": "1", "name": "Veggie Supreme", "description": "Bell peppers, mushrooms, olives, and onions", "price": Decimal("13.99"), "image": _PIZZA_IMAGE},
    {"id": "m4", "restaurant_id": "2", "name": "Classic Burger", "description": "Beef patty, lettuce, tomato, onion, and special sauce", "price": Decimal("9.99"), "image": _BURGER_IMAGE},
    {"id": "m5", "restaurant_id": "2", "name": "Bacon Cheeseburger", "description": "Double beef, crispy bacon, and cheddar cheese", "price": Decimal("12.99"), "image": _BURGER_IMAGE},
    {"id": "m6", "restaurant_id": "3", "name": "California Roll", "description": "Crab, avocado, and cucumber", "price": Decimal("8.99"), "image": _CHINESE_IMAGE},
    {"id": "m7", "restaurant_id": "3", "name": "Salmon Nigiri Set", "description": "8 pieces of fresh salmon nigiri", "price": Decimal("16.99"), "image": _CHINESE_IMAGE},
    {"id": "m8", "restaurant_id": "4", "name": "Carbonara", "description": "Creamy sauce with pancetta and parmesan", "price": Decimal("14.99"), "image": _ABACHA_IMAGE},
    {"id": "m9", "restaurant_id": "4", "name": "Spaghetti Bolognese", "description": "Rich meat sauce with Italian herbs", "price": Decimal("13.99"), "image": _ABACHA_IMAGE},
    {"id": "m10", "restaurant_id": "5", "name": "Caesar Salad", "description": "Romaine lettuce, croutons, and parmesan", "price": Decimal("10.99"), "image": _SHARATON_IMAGE},
    {"id": "m11", "restaurant_id": "5", "name": "Greek Salad", "description": "Tomatoes, cucumbers, feta, and olives", "price": Decimal("11.99"), "image": _SHARATON_IMAGE},
    {"id": "m12", "restaurant_id": "6", "name": "Mixed Grill Platter", "description": "Chicken, beef, and lamb with sides", "price": Decimal("18.99"), "image": _SUYA_IMAGE},
]

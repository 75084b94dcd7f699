# main.py
from cafe_orders.app import run

if __name__ == "__main__":
    run()

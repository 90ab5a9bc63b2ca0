import uvicorn

from stock_gateway.config import HOST, PORT


def main():
    uvicorn.run("stock_gateway.main:app", host=HOST, port=PORT)


if __name__ == "__main__":
    main()

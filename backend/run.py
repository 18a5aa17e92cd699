from lobby import create_app

app = create_app()

if __name__ == '__main__':
    try:
        # Threaded dev server: one thread per request, rooms serialize themselves
        app.run(host='0.0.0.0', port=app.config['PORT'], threaded=True)
    finally:
        app.extensions['lobby'].store.flush()

"""HTML pages for the hosted (browser) checkout flow"""

from fastapi.responses import HTMLResponse
from jinja2 import DictLoader, Environment, select_autoescape

from ...config import APP_DEEP_LINK

TEMPLATES = {
    "message.html": """
<!DOCTYPE html>
<html>
  <head>
    <meta name="viewport" content="width=device-width, initial-scale=1">
    <title>{{ title }}</title>
  </head>
  <body style="font-family: Arial, sans-serif; padding: 20px; text-align: center;">
    <h2 style="color: #d32f2f;">{{ title }}</h2>
    <p>{{ message }}</p>
    <a href="{{ dashboard_url }}" style="color: #1976d2; text-decoration: none;">Return to App</a>
  </body>
</html>
""",
    "checkout.html": """
<!DOCTYPE html>
<html>
  <head>
    <title>CarrierHub Payment</title>
    <meta name="viewport" content="width=device-width, initial-scale=1">
    <script src="https://checkout.razorpay.com/v1/checkout.js"></script>
    <style>
      body { font-family: 'Segoe UI', Tahoma, Geneva, Verdana, sans-serif; margin: 0; padding: 20px;
             background: linear-gradient(135deg, #667eea 0%, #764ba2 100%); min-height: 100vh;
             display: flex; align-items: center; justify-content: center; }
      .container { max-width: 400px; background: white; border-radius: 16px; padding: 32px; text-align: center;
                   box-shadow: 0 20px 25px -5px rgba(0, 0, 0, 0.1); }
      .logo { width: 60px; height: 60px; background: #2563eb; border-radius: 50%; margin: 0 auto 20px;
              display: flex; align-items: center; justify-content: center; color: white; font-size: 24px;
              font-weight: bold; }
      h2 { color: #1f2937; margin: 0 0 8px 0; }
      .subtitle { color: #6b7280; margin-bottom: 32px; font-size: 14px; }
      .info { background: #f8fafc; padding: 20px; margin: 24px 0; border-radius: 12px; border-left: 4px solid #2563eb; }
      .info p { margin: 12px 0; display: flex; justify-content: space-between; color: #374151; }
      .btn { background: #2563eb; color: white; padding: 16px 32px; border: none; border-radius: 12px;
             cursor: pointer; font-size: 16px; font-weight: 600; width: 100%; margin: 24px 0; }
      .btn:disabled { background: #d1d5db; cursor: not-allowed; }
      .loading { display: none; color: #6b7280; font-style: italic; margin: 16px 0; font-size: 14px; }
      .error { display: none; color: #dc2626; background: #fef2f2; padding: 16px; border-radius: 8px;
               margin: 16px 0; border: 1px solid #fecaca; }
      .return-link { display: inline-block; margin-top: 24px; color: #2563eb; text-decoration: none;
                     padding: 12px 24px; border: 2px solid #2563eb; border-radius: 8px; }
    </style>
  </head>
  <body>
    <div class="container">
      <div class="logo">CH</div>
      <h2>Secure Payment</h2>
      <p class="subtitle">Complete your consultation booking</p>
      <div class="info">
        <p><strong>Amount:</strong> <span>&#8377;{{ amount_display }}</span></p>
        <p><strong>Booking ID:</strong> <span>#{{ booking_id }}</span></p>
        <p><strong>Name:</strong> <span>{{ student_name }}</span></p>
        <p><strong>Email:</strong> <span>{{ student_email }}</span></p>
      </div>
      <div class="error" id="error-message"></div>
      <div class="loading" id="loading">Initializing secure payment...</div>
      <button class="btn" id="pay-btn" onclick="startPayment()">Pay &#8377;{{ amount_display }} Securely</button>
      <p style="font-size: 12px; color: #6b7280;">Secured by Razorpay</p>
      <a href="{{ dashboard_url }}" class="return-link">&larr; Return to App</a>
    </div>
    <script>
      const checkout = {{ checkout | tojson }};
      const payLabel = {{ ("Pay ₹" ~ amount_display ~ " Securely") | tojson }};
      let paymentInProgress = false;

      function resetButton() {
        const btn = document.getElementById('pay-btn');
        btn.disabled = false;
        btn.textContent = payLabel;
        document.getElementById('loading').style.display = 'none';
        paymentInProgress = false;
      }

      function showError(message) {
        const errorDiv = document.getElementById('error-message');
        errorDiv.textContent = message;
        errorDiv.style.display = 'block';
        resetButton();
      }

      function startPayment() {
        if (paymentInProgress) {
          return;
        }
        document.getElementById('error-message').style.display = 'none';
        const btn = document.getElementById('pay-btn');
        btn.disabled = true;
        btn.textContent = 'Processing...';
        document.getElementById('loading').style.display = 'block';
        paymentInProgress = true;

        if (typeof window.Razorpay === 'undefined') {
          showError('Payment system not loaded. Please refresh and try again.');
          return;
        }
        if (!checkout.key) {
          showError('Payment configuration error. Please contact support.');
          return;
        }

        const options = {
          key: checkout.key,
          amount: checkout.amount,
          currency: checkout.currency,
          name: 'CarrierHub',
          description: 'Consultation Booking Payment',
          order_id: checkout.orderId,
          prefill: { name: checkout.name, email: checkout.email, contact: '' },
          theme: { color: '#2563eb' },
          handler: function (response) {
            const params = new URLSearchParams({
              paymentId: response.razorpay_payment_id,
              orderId: response.razorpay_order_id,
              signature: response.razorpay_signature,
              bookingId: String(checkout.bookingId)
            });
            window.location.href = checkout.successUrl + '?' + params.toString();
          },
          modal: { ondismiss: resetButton, confirm_close: true, escape: true, backdropclose: false },
          retry: { enabled: true, max_count: 3 },
          timeout: 300
        };

        try {
          document.getElementById('loading').style.display = 'none';
          const rzp = new window.Razorpay(options);
          rzp.on('payment.failed', function (response) {
            showError('Payment failed: ' + (response.error && response.error.description || 'Unknown error'));
          });
          rzp.open();
        } catch (err) {
          showError('Unable to open payment window. Please try again.');
        }
      }
    </script>
  </body>
</html>
""",
}

env = Environment(loader=DictLoader(TEMPLATES), autoescape=select_autoescape(["html"]))


def app_link(path: str) -> str:
    """Join a path onto the mobile app deep link (carrierhub:// or https://host/app)"""
    if APP_DEEP_LINK.endswith("://"):
        return f"{APP_DEEP_LINK}{path}"
    return f"{APP_DEEP_LINK.rstrip('/')}/{path}"


def render_template(name: str, status_code: int = 200, **ctx) -> HTMLResponse:
    tpl = env.get_template(name)
    return HTMLResponse(tpl.render(dashboard_url=app_link("dashboard"), **ctx), status_code=status_code)


def render_message_page(status_code: int, title: str, message: str) -> HTMLResponse:
    return render_template("message.html", status_code=status_code, title=title, message=message)


def render_checkout_page(
    *,
    key_id: str,
    order_id: str,
    booking_id: int,
    amount: int,
    currency: str,
    student_name: str,
    student_email: str,
) -> HTMLResponse:
    """Render the page that opens the Razorpay widget and hands the result back to the app"""
    return render_template(
        "checkout.html",
        booking_id=booking_id,
        amount_display=f"{amount / 100:.2f}",
        student_name=student_name,
        student_email=student_email,
        checkout={
            "key": key_id,
            "orderId": order_id,
            "amount": amount,
            "currency": currency,
            "name": student_name,
            "email": student_email,
            "bookingId": booking_id,
            "successUrl": app_link("payment-success"),
        },
    )
